# constants/catalog.py
"""
模块 / 版本 / 测试用例 / 测试结果的枚举。

测试结果状态历史上大小写不统一（"Pass" / "PASS" / "pass "），
统计时先 trim + 小写再映射回标准标签。
"""

from enum import Enum
from utils.exceptions import BizError


class ModuleStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class VersionStatus(Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    ARCHIVED = "archived"
    CURRENT = "current"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class TestPriority(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class ResultStatus(Enum):
    PASS = "Pass"
    FAIL = "Fail"
    BLOCKED = "Blocked"
    NOT_STARTED = "Not Started"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class SessionStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


DEFAULT_TEST_PRIORITY = TestPriority.MEDIUM.value
DEFAULT_TEST_CATEGORY = "Custom"
DEFAULT_RESULT_STATUS = ResultStatus.NOT_STARTED.value
DEFAULT_MODULE_ICON = "Folder"
DEFAULT_MODULE_ORDER = 999

# 归一化（trim + lower）后的别名 -> 标准标签
RESULT_STATUS_ALIASES = {
    "pass": ResultStatus.PASS.value,
    "passed": ResultStatus.PASS.value,
    "fail": ResultStatus.FAIL.value,
    "failed": ResultStatus.FAIL.value,
    "blocked": ResultStatus.BLOCKED.value,
    "not started": ResultStatus.NOT_STARTED.value,
    "notstarted": ResultStatus.NOT_STARTED.value,
}

# 缺陷 -> 回归用例优先级映射
BUG_PRIORITY_TO_TEST_PRIORITY = {
    "P1": TestPriority.HIGH.value,
    "P2": TestPriority.HIGH.value,
    "P3": TestPriority.MEDIUM.value,
    "P4": TestPriority.LOW.value,
}


def canonical_label(normalized_key, vocabulary) -> str:
    """把 trim+lower 之后的分组键映射回词表中的标准写法，未知值原样返回。"""
    if normalized_key is None:
        return "Unknown"
    for value in vocabulary:
        if value.lower() == normalized_key:
            return value
    return normalized_key


def canonical_result_status(normalized_key) -> str:
    if normalized_key is None:
        return "Unknown"
    return RESULT_STATUS_ALIASES.get(normalized_key, normalized_key)


def validate_version_status(status: str):
    if status not in VersionStatus.values():
        raise BizError(f"status must be one of {VersionStatus.values()}", 400)


def validate_module_status(status: str):
    if status not in ModuleStatus.values():
        raise BizError(f"status must be one of {ModuleStatus.values()}", 400)


def validate_test_priority(priority: str):
    if priority not in TestPriority.values():
        raise BizError(f"priority must be one of {TestPriority.values()}", 400)
