# -*- coding: utf-8 -*-
"""
attachment.py
--------------------------------------------------------------------
通用附件索引：
- 与 Comment 一样通过 target_type + target_id 关联实体。
- filename 为存储层实际文件名（避免冲突），original_name 为上传时的原始名。
- 文件内容在上传目录中，本表只是索引；path 为对外访问路径 /uploads/<kind>s/<filename>。
"""

from sqlalchemy import func

from extensions.database import db
from .mixins import DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import ATTACHMENT
from utils.datetime_helpers import utc_now


class Attachment(DescribedMixin, db.Model):
    __tablename__ = "attachments"
    __table_args__ = (
        db.Index("ix_attachment_target", "target_type", "target_id"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = ATTACHMENT

    id = db.Column(db.Integer, primary_key=True)
    attachment_id = db.Column(db.String(64), unique=True, nullable=False)
    target_type = db.Column(db.String(32), nullable=False)
    target_id = db.Column(db.String(64), nullable=False)
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    mimetype = db.Column(db.String(128))
    size = db.Column(db.Integer)
    path = db.Column(db.String(512), nullable=False)
    uploaded_by_id = db.Column(db.String(64))
    uploaded_by_name = db.Column(db.String(120))
    uploaded_at = db.Column(db.DateTime, nullable=False, default=utc_now, server_default=func.now())
