# constants/bug.py
"""
缺陷相关的枚举与常量集合
  - 优先级 Priority: P1 / P2 / P3 / P4（功能规划共用）
  - 严重程度 Severity: Critical / Major / Minor / Trivial
  - 类型 Type: Functional / UI / Performance / Security / Other
  - 状态 Status: New -> Triaged -> Assigned -> In Progress -> Fixed
                 -> Ready for Test -> Verified -> Closed，另有 Reopened / Rejected
  - 解决方式 Resolution
状态之间不做流转限制，任何枚举值都可以从任意状态进入。
"""

from enum import Enum
from utils.exceptions import BizError


class Priority(Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class BugSeverity(Enum):
    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"
    TRIVIAL = "Trivial"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class BugType(Enum):
    FUNCTIONAL = "Functional"
    UI = "UI"
    PERFORMANCE = "Performance"
    SECURITY = "Security"
    OTHER = "Other"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class BugStatus(Enum):
    NEW = "New"
    TRIAGED = "Triaged"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    FIXED = "Fixed"
    READY_FOR_TEST = "Ready for Test"
    VERIFIED = "Verified"
    CLOSED = "Closed"
    REOPENED = "Reopened"
    REJECTED = "Rejected"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class BugResolution(Enum):
    FIXED = "Fixed"
    WONT_FIX = "Won't Fix"
    DUPLICATE = "Duplicate"
    CANNOT_REPRODUCE = "Cannot Reproduce"
    BY_DESIGN = "By Design"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


DEFAULT_PRIORITY = Priority.P3.value
DEFAULT_SEVERITY = BugSeverity.MINOR.value
DEFAULT_BUG_TYPE = BugType.FUNCTIONAL.value
DEFAULT_BUG_STATUS = BugStatus.NEW.value

# 进入这些状态时写入 resolution + resolved_at
RESOLVING_STATUSES = {
    BugStatus.FIXED.value: BugResolution.FIXED.value,
    BugStatus.REJECTED.value: BugResolution.WONT_FIX.value,
}


# -------- 校验辅助函数 --------
def _check(value, allowed, label):
    if value not in allowed:
        raise BizError(f"{label} must be one of {allowed}", 400)


def validate_bug_fields(
        *,
        priority: str = None,
        severity: str = None,
        bug_type: str = None,
        status: str = None,
        resolution: str = None,
):
    """None 值跳过校验；resolution 允许显式清空为 None。"""
    if priority is not None:
        _check(priority, Priority.values(), "priority")
    if severity is not None:
        _check(severity, BugSeverity.values(), "severity")
    if bug_type is not None:
        _check(bug_type, BugType.values(), "type")
    if status is not None:
        _check(status, BugStatus.values(), "status")
    if resolution is not None:
        _check(resolution, BugResolution.values(), "resolution")
