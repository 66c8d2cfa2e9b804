# -*- coding: utf-8 -*-
"""
module.py
--------------------------------------------------------------------
业务模块（被测系统的功能分区）。
- module_id 为稳定 slug（MOD_INV 之类），可由调用方指定。
- status=inactive 即软删除；测试用例按 name 关联模块。
"""

from extensions.database import db
from .mixins import TimestampMixin, DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import MODULE
from constants.catalog import ModuleStatus, DEFAULT_MODULE_ICON, DEFAULT_MODULE_ORDER


class Module(TimestampMixin, DescribedMixin, db.Model):
    __tablename__ = "modules"
    __table_args__ = (COMMON_TABLE_ARGS,)
    __descriptor__ = MODULE

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    icon = db.Column(db.String(64), default=DEFAULT_MODULE_ICON)
    display_order = db.Column(db.Integer, nullable=False, default=DEFAULT_MODULE_ORDER)
    status = db.Column(db.String(16), nullable=False, default=ModuleStatus.ACTIVE.value,
                       server_default=ModuleStatus.ACTIVE.value, index=True)
    created_by = db.Column(db.String(120))

    def __repr__(self):
        return f"<Module {self.module_id} {self.name}>"
