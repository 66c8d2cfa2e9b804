# -*- coding: utf-8 -*-
"""
session.py
--------------------------------------------------------------------
测试执行记录：
- TestSession  : 一位测试人员针对一个版本的一次测试
- TestResult   : 会话中某个用例的一次执行结果（状态 / 备注 / 错误信息）
- TestFeedback : 会话中提交的自由反馈
结果状态历史上大小写不统一，统计时再做归一化，这里原样存储。
"""

from sqlalchemy import func

from extensions.database import db
from .mixins import DescribedMixin, COMMON_TABLE_ARGS
from constants.field_descriptors import SESSION, RESULT, FEEDBACK
from constants.catalog import SessionStatus, DEFAULT_RESULT_STATUS
from utils.datetime_helpers import utc_now


class TestSession(DescribedMixin, db.Model):
    __tablename__ = "test_sessions"
    __table_args__ = (
        db.Index("ix_session_version", "version_id"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = SESSION
    __test__ = False

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(64), unique=True, nullable=False)
    version_id = db.Column(db.String(64))
    tester_id = db.Column(db.String(120))
    tester_name = db.Column(db.String(120), nullable=False)
    tester_email = db.Column(db.String(120))
    environment = db.Column(db.String(255))
    browser = db.Column(db.String(120))
    status = db.Column(db.String(16), nullable=False, default=SessionStatus.ACTIVE.value)
    overall_status = db.Column(db.String(32))
    overall_notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    started_at = db.Column(db.DateTime, nullable=False, default=utc_now, server_default=func.now(), index=True)
    completed_at = db.Column(db.DateTime)

    def __repr__(self):
        return f"<TestSession {self.session_id}>"


class TestResult(DescribedMixin, db.Model):
    __tablename__ = "test_results"
    __table_args__ = (
        db.Index("ix_result_session", "session_id"),
        db.Index("ix_result_module", "module_name"),
        COMMON_TABLE_ARGS,
    )
    __descriptor__ = RESULT
    __test__ = False

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(64), nullable=False)
    test_id = db.Column(db.String(64))
    test_case_id = db.Column(db.String(64))
    module_name = db.Column(db.String(255))
    test_case_title = db.Column(db.String(255))
    test_name = db.Column(db.String(255))
    status = db.Column(db.String(32), default=DEFAULT_RESULT_STATUS)
    priority = db.Column(db.String(16))
    category = db.Column(db.String(64))
    passed = db.Column(db.Boolean, nullable=False, default=False)
    bugs_found = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text)
    error_message = db.Column(db.Text)
    screenshots = db.Column(db.Text)
    tested_by = db.Column(db.String(120))
    tested_at = db.Column(db.DateTime, nullable=False, default=utc_now, server_default=func.now(), index=True)


class TestFeedback(DescribedMixin, db.Model):
    __tablename__ = "test_feedback"
    __table_args__ = (COMMON_TABLE_ARGS,)
    __descriptor__ = FEEDBACK
    __test__ = False

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(64), nullable=False, index=True)
    module_name = db.Column(db.String(255))
    feedback_type = db.Column(db.String(64))
    severity = db.Column(db.String(32))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    steps_to_reproduce = db.Column(db.Text)
    expected_behavior = db.Column(db.Text)
    actual_behavior = db.Column(db.Text)
    screenshots = db.Column(db.Text)
    created_by = db.Column(db.String(120))
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now, server_default=func.now(), index=True)
