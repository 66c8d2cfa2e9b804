# constants/feature.py
"""
功能规划（Feature）相关枚举
  - 状态 Status: Planned -> In Design -> Ready for Dev -> In Development -> Code Review
                 -> Ready for Test -> In Testing -> Test Failed -> Completed，
                 On Hold / Cancelled 可从任意状态进入
  - 类型 Feature Type / 复杂度 Complexity
与缺陷一样，状态流转不做限制。
"""

from enum import Enum
from constants.bug import Priority
from utils.exceptions import BizError


class FeatureStatus(Enum):
    PLANNED = "Planned"
    IN_DESIGN = "In Design"
    READY_FOR_DEV = "Ready for Dev"
    IN_DEVELOPMENT = "In Development"
    CODE_REVIEW = "Code Review"
    READY_FOR_TEST = "Ready for Test"
    IN_TESTING = "In Testing"
    TEST_FAILED = "Test Failed"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"
    CANCELLED = "Cancelled"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class FeatureType(Enum):
    NEW_FEATURE = "New Feature"
    ENHANCEMENT = "Enhancement"
    IMPROVEMENT = "Improvement"
    TECHNICAL_DEBT = "Technical Debt"
    REFACTORING = "Refactoring"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class Complexity(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


DEFAULT_FEATURE_STATUS = FeatureStatus.PLANNED.value
DEFAULT_FEATURE_TYPE = FeatureType.ENHANCEMENT.value
DEFAULT_COMPLEXITY = Complexity.MEDIUM.value
DEFAULT_DEPENDENCY_TYPE = "blocks"


def validate_feature_fields(
        *,
        priority: str = None,
        status: str = None,
        feature_type: str = None,
        complexity: str = None,
        progress_percentage=None,
):
    if priority is not None and priority not in Priority.values():
        raise BizError(f"priority must be one of {Priority.values()}", 400)
    if status is not None and status not in FeatureStatus.values():
        raise BizError(f"status must be one of {FeatureStatus.values()}", 400)
    if feature_type is not None and feature_type not in FeatureType.values():
        raise BizError(f"feature_type must be one of {FeatureType.values()}", 400)
    if complexity is not None and complexity not in Complexity.values():
        raise BizError(f"complexity must be one of {Complexity.values()}", 400)
    if progress_percentage is not None:
        try:
            value = int(progress_percentage)
        except (TypeError, ValueError):
            raise BizError("progress_percentage must be an integer", 400)
        if value < 0 or value > 100:
            raise BizError("progress_percentage must be between 0 and 100", 400)
