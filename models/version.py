# -*- coding: utf-8 -*-
"""
version.py
--------------------------------------------------------------------
被测系统的发布版本。
- 全表至多一行 is_current=True，由服务层先清空其它行再置位。
- features / bug_fixes / known_issues 为 JSON 数组文本。
"""

from extensions.database import db
from .mixins import TimestampMixin, DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import VERSION
from constants.catalog import VersionStatus


class Version(TimestampMixin, DescribedMixin, db.Model):
    __tablename__ = "versions"
    __table_args__ = (COMMON_TABLE_ARGS,)
    __descriptor__ = VERSION

    id = db.Column(db.Integer, primary_key=True)
    version_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    version_number = db.Column(db.String(32), nullable=False)
    version_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    release_date = db.Column(db.String(32))
    status = db.Column(db.String(16), nullable=False, default=VersionStatus.PLANNED.value,
                       server_default=VersionStatus.PLANNED.value)
    is_current = db.Column(db.Boolean, nullable=False, default=False, server_default="0", index=True)
    features = db.Column(db.Text)
    bug_fixes = db.Column(db.Text)
    known_issues = db.Column(db.Text)
    created_by = db.Column(db.String(120))

    def __repr__(self):
        return f"<Version {self.version_id} current={self.is_current}>"
