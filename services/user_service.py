# services/user_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from constants.field_descriptors import USER
from constants.roles import UserRole, normalize_role
from models.user import User
from repositories.user_repository import UserRepository
from services.base import StoreService
from services.update_builder import UpdateBuilder
from utils.datetime_helpers import utc_now
from utils.exceptions import BizError, missing_fields_error
from utils.ids import generate_id
from utils.password import hash_password, validate_password_policy, verify_password
from utils.validators import missing_required, normalize_email, parse_optional_bool, validate_email

logger = logging.getLogger(__name__)


class UserService(StoreService):
    """
    用户与登录。
    - 密码统一哈希存储、哈希校验（不存在明文比较的路径）
    - "删除"即停用；最后一个启用中的管理员不能被停用 / 降级
    """

    def __init__(self, store):
        super().__init__(store)
        self.repo = UserRepository(store)
        self.builder = UpdateBuilder(USER)

    # ---------- 查询 ----------
    def list(self, role: Optional[str] = None, is_active=None) -> List[User]:
        return self.repo.list_all(role=role or None, is_active=parse_optional_bool(is_active))

    def get(self, user_id: str) -> User:
        user = self.repo.get(user_id)
        if not user:
            raise BizError("User not found", 404)
        return user

    # ---------- 创建 ----------
    def create(self, data: dict, *, default_role: UserRole = UserRole.TESTER) -> User:
        missing = missing_required(data, "email", "password", "name")
        if missing:
            raise missing_fields_error(missing)

        email = normalize_email(data["email"])
        if not validate_email(email):
            raise BizError("Invalid email format", 400)
        if self.repo.find_by_email(email):
            raise BizError("Email already exists", 409)

        errors = validate_password_policy(email, data["password"])
        if errors:
            raise BizError("; ".join(errors), 400)

        try:
            role = normalize_role(data.get("role"), default=default_role)
        except ValueError:
            raise BizError(f"role must be one of {UserRole.values()}", 400)

        user = User(
            user_id=generate_id("user", 5),
            email=email,
            password_hash=hash_password(data["password"]),
            name=data["name"].strip(),
            role=role,
            is_active=parse_optional_bool(data.get("is_active")) is not False,
            created_by=data.get("created_by"),
        )
        self.repo.add(user)
        self._commit("Email already exists")
        logger.info("User created: %s (%s)", user.user_id, user.role)
        return user

    def register(self, data: dict) -> User:
        """自助注册：与管理员创建共用校验，角色缺省为 tester。"""
        return self.create(data)

    # ---------- 登录 ----------
    def authenticate(self, email: str, password: str) -> User:
        if not email or not password:
            raise BizError("Email and password are required", 400)
        user = self.repo.find_by_email(normalize_email(email))
        if not user or not user.is_active or not verify_password(user.password_hash, password):
            logger.info("Login failed for %s", normalize_email(email))
            raise BizError("Invalid email or password", 401)
        user.last_login = utc_now()
        self._commit()
        return user

    # ---------- 更新 ----------
    def update(self, user_id: str, data: dict) -> User:
        user = self.get(user_id)
        payload = dict(data or {})

        if "email" in payload:
            email = normalize_email(payload["email"])
            if not validate_email(email):
                raise BizError("Invalid email format", 400)
            if self.repo.exists_email_except_user(email, user_id):
                raise BizError("Email already exists", 409)
            payload["email"] = email

        if "role" in payload:
            try:
                payload["role"] = normalize_role(payload["role"], default=UserRole(user.role))
            except ValueError:
                raise BizError(f"role must be one of {UserRole.values()}", 400)

        assignments = self.builder.build(payload)
        new_values = dict(assignments)
        demoting = new_values.get("role", user.role) != UserRole.ADMIN.value
        deactivating = new_values.get("is_active", user.is_active) is False
        if user.is_admin and user.is_active and (demoting or deactivating):
            self._ensure_not_last_admin(user)

        self.builder.apply(user, assignments)
        self._commit("Email already exists")
        return user

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        if not old_password or not new_password:
            raise BizError("Both oldPassword and newPassword are required", 400)
        user = self.get(user_id)
        if not verify_password(user.password_hash, old_password):
            raise BizError("Current password is incorrect", 401)
        errors = validate_password_policy(user.email, new_password)
        if errors:
            raise BizError("; ".join(errors), 400)
        user.password_hash = hash_password(new_password)
        user.updated_at = utc_now()
        self._commit()
        logger.info("Password changed for %s", user.user_id)

    # ---------- 停用 ----------
    def deactivate(self, user_id: str) -> User:
        user = self.get(user_id)
        if user.is_admin and user.is_active:
            self._ensure_not_last_admin(user)
        user.is_active = False
        user.updated_at = utc_now()
        self._commit()
        logger.info("User deactivated: %s", user.user_id)
        return user

    def _ensure_not_last_admin(self, user: User):
        if self.repo.count_active_admins_except(user.user_id) == 0:
            raise BizError("Cannot remove the last admin user", 409)
