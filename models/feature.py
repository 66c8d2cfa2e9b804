# -*- coding: utf-8 -*-
"""
feature.py
--------------------------------------------------------------------
功能规划（即将发布的功能）。
- feature_id 业务主键（FEAT-<ts>-<rand>），module_id / target_version 关联模块与版本。
- 人员字段统一为 <角色>_id / _name / _email 三元组。
- acceptance_criteria / linked_tests / dependencies / tags 等为 JSON 数组文本。
- 删除 = is_deleted + status=Cancelled，行保留。
"""

from extensions.database import db
from .mixins import TimestampMixin, SoftDeleteMixin, DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import FEATURE
from constants.bug import DEFAULT_PRIORITY
from constants.feature import DEFAULT_FEATURE_STATUS, DEFAULT_FEATURE_TYPE, DEFAULT_COMPLEXITY


class Feature(TimestampMixin, SoftDeleteMixin, DescribedMixin, db.Model):
    __tablename__ = "upcoming_features"
    __table_args__ = (
        db.Index("ix_feature_module", "module_id"),
        db.Index("ix_feature_version", "target_version"),
        db.Index("ix_feature_status", "status"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = FEATURE

    id = db.Column(db.Integer, primary_key=True)
    feature_id = db.Column(db.String(64), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    # 业务价值
    business_value = db.Column(db.Text)
    user_story = db.Column(db.Text)
    acceptance_criteria = db.Column(db.Text)

    # 分类
    priority = db.Column(db.String(8), nullable=False, default=DEFAULT_PRIORITY)
    feature_type = db.Column(db.String(32), nullable=False, default=DEFAULT_FEATURE_TYPE)
    category = db.Column(db.String(64))
    complexity = db.Column(db.String(16), nullable=False, default=DEFAULT_COMPLEXITY)

    # 状态
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_FEATURE_STATUS)

    # 关联
    module_id = db.Column(db.String(64), nullable=False)
    target_version = db.Column(db.String(64), nullable=False)
    linked_tests = db.Column(db.Text)
    related_features = db.Column(db.Text)
    dependencies = db.Column(db.Text)
    blocks = db.Column(db.Text)

    # 人员
    creator_id = db.Column(db.String(64))
    creator_name = db.Column(db.String(120), nullable=False)
    creator_email = db.Column(db.String(120))
    owner_id = db.Column(db.String(64))
    owner_name = db.Column(db.String(120))
    owner_email = db.Column(db.String(120))
    developer_id = db.Column(db.String(64))
    developer_name = db.Column(db.String(120))
    developer_email = db.Column(db.String(120))
    tester_id = db.Column(db.String(64))
    tester_name = db.Column(db.String(120))
    tester_email = db.Column(db.String(120))

    # 估算与进度
    estimated_hours = db.Column(db.Float)
    actual_hours = db.Column(db.Float)
    progress_percentage = db.Column(db.Integer, nullable=False, default=0)

    # 技术细节
    technical_notes = db.Column(db.Text)
    api_endpoints = db.Column(db.Text)
    database_changes = db.Column(db.Text)
    dependencies_external = db.Column(db.Text)
    api_changes = db.Column(db.Boolean, nullable=False, default=False)
    breaking_changes = db.Column(db.Boolean, nullable=False, default=False)

    # 计划日期
    start_date = db.Column(db.String(32))
    end_date = db.Column(db.String(32))
    development_start_date = db.Column(db.String(32))
    development_end_date = db.Column(db.String(32))
    testing_start_date = db.Column(db.String(32))
    testing_end_date = db.Column(db.String(32))

    # 里程碑时间
    started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    released_at = db.Column(db.DateTime)

    attachments = db.Column(db.Text)
    tags = db.Column(db.Text)

    def __repr__(self):
        return f"<Feature {self.feature_id} status={self.status}>"
