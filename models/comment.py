# -*- coding: utf-8 -*-
"""
comment.py
--------------------------------------------------------------------
通用评论：
- 通过 target_type + target_id 挂在缺陷 / 功能规划上（target_id 为业务主键）。
- 作者信息冗余存储 id / name / email，不依赖用户表。
"""

from extensions.database import db
from .mixins import TimestampMixin, DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import COMMENT


class Comment(TimestampMixin, DescribedMixin, db.Model):
    __tablename__ = "comments"
    __table_args__ = (
        db.Index("ix_comment_target", "target_type", "target_id"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = COMMENT

    id = db.Column(db.Integer, primary_key=True)
    target_type = db.Column(db.String(32), nullable=False)  # bug / feature
    target_id = db.Column(db.String(64), nullable=False)
    comment_text = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.String(64))
    author_name = db.Column(db.String(120))
    author_email = db.Column(db.String(120))
    is_internal = db.Column(db.Boolean, nullable=False, default=False)
