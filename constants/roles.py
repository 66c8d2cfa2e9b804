from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    门户全局角色：
    - admin  : 管理用户、模块、版本，执行维护操作
    - tester : 执行测试、提交缺陷与反馈
    """

    ADMIN = "admin"
    TESTER = "tester"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls.values()


DEFAULT_ROLE = UserRole.TESTER


def normalize_role(raw: str | None, default: UserRole = DEFAULT_ROLE) -> str:
    """
    清洗外部传入的 role 值：
    - None 或空 => 默认
    - 去掉首尾空白并转小写
    - 校验是否在已注册角色中
    """
    if not raw:
        return default.value
    value = str(raw).strip().lower()
    if not UserRole.has_value(value):
        raise ValueError(f"Invalid role: {raw}")
    return value
