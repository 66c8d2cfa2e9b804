# repositories/version_repository.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select, update

from models.version import Version
from models.session import TestSession
from repositories.base import EntityRepository
from utils.datetime_helpers import utc_now


class VersionRepository(EntityRepository[Version]):
    model = Version
    key_column = "version_id"

    def list(self, status: Optional[str] = None, is_current: Optional[bool] = None) -> List[Version]:
        stmt = select(Version)
        if status:
            stmt = stmt.where(Version.status == status)
        if is_current is not None:
            stmt = stmt.where(Version.is_current.is_(is_current))
        stmt = stmt.order_by(Version.version_number.desc(), Version.id.desc())
        return self.scalars(stmt)

    def get_current(self) -> Optional[Version]:
        stmt = select(Version).where(Version.is_current.is_(True)).order_by(Version.id.desc()).limit(1)
        return self.session.execute(stmt).scalars().first()

    def clear_current(self, except_version_id: Optional[str] = None) -> int:
        """把（除 except_version_id 以外的）所有版本的 is_current 置为 False。"""
        stmt = update(Version).where(Version.is_current.is_(True))
        if except_version_id:
            stmt = stmt.where(Version.version_id != except_version_id)
        result = self.session.execute(stmt.values(is_current=False, updated_at=utc_now()))
        return result.rowcount or 0

    def count_current(self) -> int:
        stmt = select(func.count()).select_from(Version).where(Version.is_current.is_(True))
        return self.session.execute(stmt).scalar() or 0

    def count_sessions(self, version_id: str) -> int:
        stmt = select(func.count()).select_from(TestSession).where(TestSession.version_id == version_id)
        return self.session.execute(stmt).scalar() or 0

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(Version)).scalar() or 0
