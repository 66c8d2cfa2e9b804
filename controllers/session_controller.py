# controllers/session_controller.py
from flask import Blueprint, request

from controllers.common import dump, json_body, render_biz_error, store
from services.session_service import SessionService
from utils.exceptions import BizError
from utils.response import json_response, success_response

session_bp = Blueprint("sessions", __name__)


@session_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


# ---------- 会话 ----------
@session_bp.post("/api/sessions")
def create_session():
    session = SessionService(store()).create(json_body())
    return success_response("Test session created successfully", 201, session_id=session.session_id)


@session_bp.get("/api/sessions")
def list_sessions():
    return json_response(dump(SessionService(store()).list()))


@session_bp.get("/api/sessions/<session_id>")
def get_session(session_id):
    """会话 + 其下全部结果与反馈"""
    return json_response(SessionService(store()).detail(session_id))


@session_bp.put("/api/sessions/<session_id>")
def update_session(session_id):
    SessionService(store()).update(session_id, json_body())
    return success_response("Session updated successfully")


@session_bp.put("/api/sessions/<session_id>/end")
def end_session(session_id):
    SessionService(store()).end(session_id)
    return success_response("Session ended successfully")


@session_bp.post("/api/sessions/<session_id>/results")
def add_session_result(session_id):
    result = SessionService(store()).add_result(json_body(), session_id=session_id)
    return success_response("Test result saved successfully", 201, result_id=result.id)


# ---------- 结果 ----------
@session_bp.post("/api/results")
def add_result():
    result = SessionService(store()).add_result(json_body())
    return success_response("Test result saved successfully", 201, id=result.id)


@session_bp.get("/api/results/module/<module_name>")
def results_by_module(module_name):
    return json_response(dump(SessionService(store()).results_for_module(module_name)))


# ---------- 反馈 ----------
@session_bp.post("/api/feedback")
def add_feedback():
    feedback = SessionService(store()).add_feedback(json_body())
    return success_response("Feedback submitted successfully", 201, id=feedback.id)


@session_bp.get("/api/feedback")
def list_feedback():
    """可选过滤 severity / module_name / feedback_type"""
    return json_response(dump(SessionService(store()).list_feedback(request.args)))
