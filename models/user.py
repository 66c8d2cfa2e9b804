# -*- coding: utf-8 -*-
"""
user.py
--------------------------------------------------------------------
门户用户。
说明：
- user_id 为对外业务主键（user-<ts>-<rand>），id 为自增主键。
- role 为全局角色：admin / tester。
- is_active 控制账号启用状态；删除接口只做停用，避免历史记录失参。
- password_hash 永远是哈希值，to_dict 不输出。
"""

from extensions.database import db
from .mixins import TimestampMixin, DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import USER
from constants.roles import UserRole


class User(TimestampMixin, DescribedMixin, db.Model):
    __tablename__ = "users"
    __table_args__ = (COMMON_TABLE_ARGS,)
    __descriptor__ = USER
    __hidden__ = ("password_hash",)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(32), nullable=False, server_default=UserRole.TESTER.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default="1")
    created_by = db.Column(db.String(120))
    last_login = db.Column(db.DateTime)

    def __repr__(self):
        return f"<User user_id={self.user_id} email={self.email} role={self.role}>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
