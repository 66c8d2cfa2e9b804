# -*- coding: utf-8 -*-
"""
__init__.py
--------------------------------------------------------------------
汇总导入所有模型，使得：
- Flask-Migrate/Alembic 与 EntityStore.init_app 的 create_all 能发现全部表。
- 外部模块可简化引用：from models import Bug, Feature
注意：
- 避免循环导入：各模型仅在这里集中 import。
"""

from .mixins import TimestampMixin, SoftDeleteMixin, DescribedMixin
from .user import User
from .module import Module
from .version import Version
from .feature import Feature
from .bug import Bug
from .test_case import TestCase
from .session import TestSession, TestResult, TestFeedback
from .comment import Comment
from .attachment import Attachment
from .history import History
from .dependency import FeatureDependency

__all__ = [
    "TimestampMixin", "SoftDeleteMixin", "DescribedMixin",
    "User", "Module", "Version", "Feature", "Bug", "TestCase",
    "TestSession", "TestResult", "TestFeedback",
    "Comment", "Attachment", "History", "FeatureDependency",
]
