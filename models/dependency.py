# -*- coding: utf-8 -*-
"""
dependency.py
--------------------------------------------------------------------
功能规划之间的依赖边（自关联）：feature_id 依赖 depends_on_feature_id。
dependency_type 默认 blocks。
"""

from sqlalchemy import func

from extensions.database import db
from .mixins import DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import DEPENDENCY
from constants.feature import DEFAULT_DEPENDENCY_TYPE
from utils.datetime_helpers import utc_now


class FeatureDependency(DescribedMixin, db.Model):
    __tablename__ = "feature_dependencies"
    __table_args__ = (
        db.Index("ix_dependency_feature", "feature_id"),
        db.Index("ix_dependency_depends_on", "depends_on_feature_id"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = DEPENDENCY

    id = db.Column(db.Integer, primary_key=True)
    feature_id = db.Column(db.String(64), nullable=False)
    depends_on_feature_id = db.Column(db.String(64), nullable=False)
    dependency_type = db.Column(db.String(32), nullable=False, default=DEFAULT_DEPENDENCY_TYPE)
    is_critical = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now, server_default=func.now())
