# -*- coding: utf-8 -*-
"""
history.py
--------------------------------------------------------------------
变更历史（缺陷 / 功能规划共用）：
- 只追加，不修改、不删除。
- 字段级更新：action=Updated + field_name + old_value / new_value（均为字符串）。
- 生命周期事件：Created / Status Changed / Deleted / Attachment Added ... 各写一行。
"""

from sqlalchemy import func

from extensions.database import db
from .mixins import DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import HISTORY
from utils.datetime_helpers import utc_now


class History(DescribedMixin, db.Model):
    __tablename__ = "entity_history"
    __table_args__ = (
        db.Index("ix_history_entity", "entity_type", "entity_id"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = HISTORY

    id = db.Column(db.Integer, primary_key=True)
    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.String(64), nullable=False)
    action = db.Column(db.String(64), nullable=False)
    field_name = db.Column(db.String(64))
    old_value = db.Column(db.Text)
    new_value = db.Column(db.Text)
    changed_by_id = db.Column(db.String(64))
    changed_by_name = db.Column(db.String(120))
    changed_at = db.Column(db.DateTime, nullable=False, default=utc_now, server_default=func.now())

    def __repr__(self):
        return f"<History {self.entity_type}:{self.entity_id} {self.action} {self.field_name}>"
