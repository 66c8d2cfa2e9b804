# -*- coding: utf-8 -*-
"""
bug.py
--------------------------------------------------------------------
缺陷实体。
- bug_id 业务主键（BUG-<ts>-<rand>）。
- reporter / assignee / verifier 三组人员三元组。
- steps_to_reproduce / linked_tests / related_bugs / tags / attachments 为 JSON 数组，
  environment 为 JSON 对象（浏览器、系统、URL ...）。
- 删除 = is_deleted + Rejected + Won't Fix，按 id 仍可查到。
"""

from extensions.database import db
from .mixins import TimestampMixin, SoftDeleteMixin, DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import BUG
from constants.bug import DEFAULT_PRIORITY, DEFAULT_SEVERITY, DEFAULT_BUG_TYPE, DEFAULT_BUG_STATUS


class Bug(TimestampMixin, SoftDeleteMixin, DescribedMixin, db.Model):
    __tablename__ = "bugs"
    __table_args__ = (
        db.Index("ix_bug_status", "status"),
        db.Index("ix_bug_assignee", "assignee_id"),
        db.Index("ix_bug_priority", "priority"),
        db.Index("ix_bug_module", "module_id"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = BUG

    id = db.Column(db.Integer, primary_key=True)
    bug_id = db.Column(db.String(64), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    steps_to_reproduce = db.Column(db.Text)
    expected_result = db.Column(db.Text)
    actual_result = db.Column(db.Text)

    # 分类
    priority = db.Column(db.String(8), nullable=False, default=DEFAULT_PRIORITY)
    severity = db.Column(db.String(16), nullable=False, default=DEFAULT_SEVERITY)
    category = db.Column(db.String(64))
    type = db.Column(db.String(32), nullable=False, default=DEFAULT_BUG_TYPE)

    # 状态
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_BUG_STATUS)
    resolution = db.Column(db.String(32))

    # 关联
    linked_tests = db.Column(db.Text)
    related_bugs = db.Column(db.Text)
    parent_bug_id = db.Column(db.String(64))
    module_id = db.Column(db.String(64))
    session_id = db.Column(db.String(64))

    # 人员
    reporter_id = db.Column(db.String(64))
    reporter_name = db.Column(db.String(120))
    reporter_email = db.Column(db.String(120))
    assignee_id = db.Column(db.String(64))
    assignee_name = db.Column(db.String(120))
    assignee_email = db.Column(db.String(120))
    verifier_id = db.Column(db.String(64))
    verifier_name = db.Column(db.String(120))
    verifier_email = db.Column(db.String(120))

    environment = db.Column(db.Text)

    # 版本追踪
    found_in_version = db.Column(db.String(64))
    fixed_in_version = db.Column(db.String(64))
    target_release = db.Column(db.String(64))

    resolved_at = db.Column(db.DateTime)
    verified_at = db.Column(db.DateTime)

    attachments = db.Column(db.Text)
    tags = db.Column(db.Text)

    def __repr__(self):
        return f"<Bug {self.bug_id} status={self.status}>"
