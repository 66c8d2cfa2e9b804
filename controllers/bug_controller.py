# controllers/bug_controller.py
from flask import Blueprint, request

from controllers.common import dump, json_body, render_biz_error, store
from services.attachment_service import attachment_payload
from services.bug_service import BugService
from utils.exceptions import BizError
from utils.response import json_response, success_response

bug_bp = Blueprint("bugs", __name__, url_prefix="/api/bugs")


@bug_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@bug_bp.get("")
def list_bugs():
    """
    GET /api/bugs
    过滤：status / priority / severity / assignee_id / module_id / search
         show_deleted=true|false|all、show_rejected=true|false
    分页：limit（默认 100）/ offset
    """
    return json_response(dump(BugService(store()).list(request.args)))


@bug_bp.get("/stats")
def bug_stats():
    stats = BugService(store()).stats(
        module_id=request.args.get("module_id"),
        assignee_id=request.args.get("assignee_id"),
    )
    return json_response(stats)


@bug_bp.get("/by-test/<test_id>")
def bugs_by_test(test_id):
    return json_response(dump(BugService(store()).list_by_test(test_id)))


@bug_bp.get("/<bug_id>")
def get_bug(bug_id):
    return json_response(BugService(store()).get(bug_id).to_dict())


@bug_bp.post("")
def create_bug():
    bug = BugService(store()).create(json_body())
    return success_response("Bug created successfully", 201, id=bug.id, bug_id=bug.bug_id)


@bug_bp.put("/<bug_id>")
def update_bug(bug_id):
    _, changes = BugService(store()).update(bug_id, json_body())
    return success_response(
        "Bug updated successfully", changes=1, changed_fields=[change.field for change in changes],
    )


@bug_bp.post("/<bug_id>/status")
def change_bug_status(bug_id):
    bug = BugService(store()).change_status(bug_id, json_body())
    return success_response(f"Bug status updated to {bug.status}")


@bug_bp.delete("/<bug_id>")
def delete_bug(bug_id):
    BugService(store()).delete(bug_id, json_body())
    return success_response("Bug deleted successfully")


# ---------- 评论 / 历史 ----------
@bug_bp.post("/<bug_id>/comments")
def add_bug_comment(bug_id):
    comment = BugService(store()).add_comment(bug_id, json_body())
    return success_response("Comment added successfully", 201, id=comment.id)


@bug_bp.get("/<bug_id>/comments")
def list_bug_comments(bug_id):
    return json_response(dump(BugService(store()).list_comments(bug_id)))


@bug_bp.get("/<bug_id>/history")
def bug_history(bug_id):
    return json_response(BugService(store()).list_history(bug_id))


# ---------- 关联用例 ----------
@bug_bp.post("/<bug_id>/link-test")
def link_test(bug_id):
    BugService(store()).link_test(bug_id, json_body())
    return success_response("Test linked successfully")


@bug_bp.get("/<bug_id>/tests")
def linked_tests(bug_id):
    return json_response(dump(BugService(store()).linked_tests(bug_id)))


@bug_bp.post("/<bug_id>/create-test")
def create_test_from_bug(bug_id):
    test = BugService(store()).create_regression_test(bug_id, json_body())
    return success_response("Test case created successfully", 201, test_id=test.test_id, test=test.to_dict())


# ---------- 附件 ----------
@bug_bp.post("/<bug_id>/attachments")
def upload_bug_attachments(bug_id):
    rows = BugService(store()).upload_attachments(bug_id, request.files.getlist("files"), request.form)
    return success_response(
        f"{len(rows)} file(s) uploaded successfully", 201,
        attachments=[attachment_payload(row) for row in rows],
    )


@bug_bp.get("/<bug_id>/attachments")
def list_bug_attachments(bug_id):
    return json_response(dump(BugService(store()).list_attachments(bug_id)))


@bug_bp.delete("/<bug_id>/attachments/<attachment_id>")
def delete_bug_attachment(bug_id, attachment_id):
    BugService(store()).delete_attachment(bug_id, attachment_id, json_body())
    return success_response("Attachment deleted successfully")
