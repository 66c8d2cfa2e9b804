# controllers/feature_controller.py
from flask import Blueprint, request

from controllers.common import dump, json_body, render_biz_error, store
from services.attachment_service import attachment_payload
from services.feature_service import FeatureService
from utils.exceptions import BizError
from utils.response import json_response, success_response

feature_bp = Blueprint("features", __name__, url_prefix="/api/features")


@feature_bp.errorhandler(BizError)
def _biz_error(e: BizError):
    return render_biz_error(e)


@feature_bp.get("")
def list_features():
    """
    GET /api/features
    过滤：status / priority / module_id / target_version / owner_id / feature_type / search
    show_deleted 默认 false；limit / offset 分页
    """
    return json_response(dump(FeatureService(store()).list(request.args)))


@feature_bp.get("/stats")
def feature_stats():
    stats = FeatureService(store()).stats(
        module_id=request.args.get("module_id"),
        target_version=request.args.get("target_version"),
    )
    return json_response(stats)


@feature_bp.get("/by-version/<version_id>")
def features_by_version(version_id):
    return json_response(dump(FeatureService(store()).list_by_version(version_id)))


@feature_bp.get("/by-module/<module_id>")
def features_by_module(module_id):
    return json_response(dump(FeatureService(store()).list_by_module(module_id)))


@feature_bp.get("/<feature_id>")
def get_feature(feature_id):
    return json_response(FeatureService(store()).get(feature_id).to_dict())


@feature_bp.post("")
def create_feature():
    feature = FeatureService(store()).create(json_body())
    return success_response("Feature created successfully", 201, id=feature.id, feature_id=feature.feature_id)


@feature_bp.put("/<feature_id>")
def update_feature(feature_id):
    _, changes = FeatureService(store()).update(feature_id, json_body())
    return success_response(
        "Feature updated successfully", changes=1, changed_fields=[change.field for change in changes],
    )


@feature_bp.put("/<feature_id>/status")
def change_feature_status(feature_id):
    FeatureService(store()).change_status(feature_id, json_body())
    return success_response("Feature status updated")


@feature_bp.delete("/<feature_id>")
def delete_feature(feature_id):
    FeatureService(store()).delete(feature_id, json_body())
    return success_response("Feature cancelled successfully")


# ---------- 关联用例 ----------
@feature_bp.post("/<feature_id>/link-test")
def link_test(feature_id):
    linked = FeatureService(store()).link_test(feature_id, json_body())
    return success_response("Test linked to feature" if linked else "Test already linked")


@feature_bp.delete("/<feature_id>/unlink-test/<test_id>")
def unlink_test(feature_id, test_id):
    FeatureService(store()).unlink_test(feature_id, test_id, json_body())
    return success_response("Test unlinked from feature")


@feature_bp.get("/<feature_id>/linked-tests")
def linked_tests(feature_id):
    return json_response(dump(FeatureService(store()).linked_tests(feature_id)))


# ---------- 依赖 ----------
@feature_bp.get("/<feature_id>/dependencies")
def list_dependencies(feature_id):
    return json_response(dump(FeatureService(store()).list_dependencies(feature_id)))


@feature_bp.post("/<feature_id>/dependencies")
def add_dependency(feature_id):
    dependency = FeatureService(store()).add_dependency(feature_id, json_body())
    return success_response("Dependency added successfully", 201, dependency_id=dependency.id)


@feature_bp.delete("/<feature_id>/dependencies/<dependency_id>")
def remove_dependency(feature_id, dependency_id):
    FeatureService(store()).remove_dependency(feature_id, dependency_id)
    return success_response("Dependency removed successfully")


# ---------- 评论 / 历史 ----------
@feature_bp.post("/<feature_id>/comments")
def add_feature_comment(feature_id):
    comment = FeatureService(store()).add_comment(feature_id, json_body())
    return success_response("Comment added successfully", 201, id=comment.id)


@feature_bp.get("/<feature_id>/comments")
def list_feature_comments(feature_id):
    return json_response(dump(FeatureService(store()).list_comments(feature_id)))


@feature_bp.get("/<feature_id>/history")
def feature_history(feature_id):
    return json_response(FeatureService(store()).list_history(feature_id))


# ---------- 附件 ----------
@feature_bp.post("/<feature_id>/attachments")
def upload_feature_attachments(feature_id):
    rows = FeatureService(store()).upload_attachments(feature_id, request.files.getlist("files"), request.form)
    return success_response(
        f"{len(rows)} file(s) uploaded successfully", 201,
        attachments=[attachment_payload(row) for row in rows],
    )


@feature_bp.get("/<feature_id>/attachments")
def list_feature_attachments(feature_id):
    return json_response(dump(FeatureService(store()).list_attachments(feature_id)))


@feature_bp.delete("/<feature_id>/attachments/<attachment_id>")
def delete_feature_attachment(feature_id, attachment_id):
    FeatureService(store()).delete_attachment(feature_id, attachment_id, json_body())
    return success_response("Attachment deleted successfully")
