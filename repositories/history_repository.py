# repositories/history_repository.py
from typing import List

from sqlalchemy import select

from models.history import History
from repositories.base import EntityRepository


class HistoryRepository(EntityRepository[History]):
    """只读 + 追加；不提供更新 / 删除。"""

    model = History
    key_column = "id"

    def list_for(self, entity_type: str, entity_id: str) -> List[History]:
        stmt = (
            select(History)
            .where(History.entity_type == entity_type, History.entity_id == entity_id)
            .order_by(History.changed_at.desc(), History.id.desc())
        )
        return self.scalars(stmt)

    def delete(self, entity):
        raise NotImplementedError("history rows are append-only")
