# services/version_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from constants.catalog import VersionStatus, canonical_result_status, validate_version_status
from constants.field_descriptors import VERSION
from models.version import Version
from repositories.statistics_repository import StatisticsRepository, bucket
from repositories.version_repository import VersionRepository
from services.base import StoreService
from services.update_builder import UpdateBuilder
from utils import json_fields
from utils.exceptions import BizError, missing_fields_error
from utils.ids import version_id_from_number
from utils.validators import coerce_bool, missing_required, parse_optional_bool

logger = logging.getLogger(__name__)


class VersionService(StoreService):
    """
    版本管理。
    任意时刻最多一个版本 is_current=True：置为当前之前先把其它版本全部清掉，
    两步在同一事务中提交。
    """

    def __init__(self, store):
        super().__init__(store)
        self.repo = VersionRepository(store)
        self.stats = StatisticsRepository(store)
        self.builder = UpdateBuilder(VERSION)

    def list(self, status: Optional[str] = None, is_current=None) -> List[Version]:
        if status and status != "all":
            validate_version_status(status)
        else:
            status = None
        return self.repo.list(status=status, is_current=parse_optional_bool(is_current))

    def get(self, version_id: str) -> Version:
        version = self.repo.get(version_id)
        if not version:
            raise BizError("Version not found", 404)
        return version

    def get_current(self) -> Version:
        version = self.repo.get_current()
        if not version:
            raise BizError("No current version set", 404)
        return version

    def create(self, data: dict) -> Version:
        missing = missing_required(data, "version_number", "version_name")
        if missing:
            raise missing_fields_error(missing)

        version_id = (data.get("version_id") or "").strip() or version_id_from_number(data["version_number"])
        if self.repo.exists(version_id):
            raise BizError("Version ID already exists", 409)

        status = data.get("status") or VersionStatus.PLANNED.value
        validate_version_status(status)
        is_current = coerce_bool(data.get("is_current"))
        if is_current:
            self.repo.clear_current()

        version = Version(
            version_id=version_id,
            version_number=str(data["version_number"]).strip(),
            version_name=data["version_name"],
            description=data.get("description"),
            release_date=data.get("release_date"),
            status=status,
            is_current=is_current,
            features=json_fields.encode(data.get("features") or []),
            bug_fixes=json_fields.encode(data.get("bug_fixes") or []),
            known_issues=json_fields.encode(data.get("known_issues") or []),
            created_by=data.get("created_by"),
        )
        self.repo.add(version)
        self._commit("Version ID already exists")
        logger.info("Version created: %s (current=%s)", version_id, is_current)
        return version

    def update(self, version_id: str, data: dict) -> Version:
        version = self.get(version_id)
        if data.get("status") is not None:
            validate_version_status(data["status"])
        assignments = self.builder.build(data)
        if dict(assignments).get("is_current") is True:
            self.repo.clear_current(except_version_id=version_id)
        self.builder.apply(version, assignments)
        self._commit()
        return version

    def set_current(self, version_id: str) -> Version:
        version = self.get(version_id)
        self.repo.clear_current(except_version_id=version_id)
        version.is_current = True
        self._commit()
        logger.info("Current version set to %s", version_id)
        return version

    def delete(self, version_id: str) -> str:
        """
        - 当前版本：拒绝（409）
        - 已被测试会话引用：归档
        - 否则物理删除
        返回提示信息。
        """
        version = self.get(version_id)
        if version.is_current:
            raise BizError("Cannot delete the current version", 409)
        if self.repo.count_sessions(version_id):
            version.status = VersionStatus.ARCHIVED.value
            self._commit()
            logger.info("Version %s archived (has sessions)", version_id)
            return "Version archived successfully"
        self.repo.delete(version)
        self._commit()
        logger.info("Version %s deleted", version_id)
        return "Version deleted successfully"

    def statistics(self, version_id: str) -> dict:
        self.get(version_id)
        stats = self.stats
        modules = [
            {
                "module_name": row["module_name"],
                "total_tests": row["total_tests"],
                "passed": row["passed"],
                "failed": row["failed"],
            }
            for row in stats.module_result_stats(version_id)
        ]
        return {
            "totalSessions": stats.count_sessions_for(version_id),
            "totalTests": stats.count_results(version_id),
            "testsByStatus": [
                {"status": status, "count": count}
                for status, count in bucket(stats.result_status_counts(version_id), canonical_result_status).items()
            ],
            "moduleStats": modules,
            "bugFixes": [dict(row) for row in stats.fixed_since_other_versions(version_id)],
            "knownIssues": [_iso_row(row) for row in stats.failing_results(version_id)],
            "newFeatures": [dict(row) for row in stats.first_seen_in_version(version_id)],
        }


def _iso_row(row) -> dict:
    data = dict(row)
    tested_at = data.get("tested_at")
    if tested_at is not None:
        data["tested_at"] = tested_at.isoformat()
    return data
