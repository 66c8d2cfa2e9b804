# -*- coding: utf-8 -*-
"""
history_service.py
--------------------------------------------------------------------
缺陷 / 功能规划的变更历史。

写入时机：主操作 commit 成功之后，单独一次 commit。
历史写失败只记日志并回滚本次历史写入，不影响已经成功的主操作。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from extensions.store import EntityStore
from models.history import History
from repositories.history_repository import HistoryRepository
from services.update_builder import FieldChange, canonical_text

logger = logging.getLogger(__name__)


class HistoryAction:
    CREATED = "Created"
    UPDATED = "Updated"
    STATUS_CHANGED = "Status Changed"
    DELETED = "Deleted"
    ATTACHMENT_ADDED = "Attachment Added"
    ATTACHMENT_DELETED = "Attachment Deleted"
    TEST_LINKED = "Test Linked"
    TEST_UNLINKED = "Test Unlinked"
    TEST_CREATED = "Test Created"


@dataclass(frozen=True)
class Actor:
    id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping, prefix: str = "changed_by", default_name: Optional[str] = None) -> "Actor":
        """从请求体里取 <prefix>_id / <prefix>_name。"""
        data = data or {}
        return cls(data.get(f"{prefix}_id"), data.get(f"{prefix}_name") or default_name)


SYSTEM = Actor(None, "System")


class HistoryRecorder:
    def __init__(self, store: EntityStore, entity_type: str):
        self.store = store
        self.entity_type = entity_type
        self.repo = HistoryRepository(store)

    def list(self, entity_id: str) -> List[dict]:
        return [row.to_dict() for row in self.repo.list_for(self.entity_type, entity_id)]

    def record(self, entity_id: str, action: str, field_name: Optional[str] = None,
               old_value=None, new_value=None, actor: Optional[Actor] = None) -> bool:
        return self._write(entity_id, [(action, field_name, old_value, new_value)], actor)

    def record_changes(self, entity_id: str, changes: Iterable[FieldChange], actor: Optional[Actor] = None,
                       action: str = HistoryAction.UPDATED) -> bool:
        rows = [(action, c.field, c.old_value, c.new_value) for c in changes]
        if not rows:
            return True
        return self._write(entity_id, rows, actor)

    def _write(self, entity_id: str, rows, actor: Optional[Actor]) -> bool:
        actor = actor or Actor()
        try:
            for action, field_name, old_value, new_value in rows:
                self.repo.add(History(
                    entity_type=self.entity_type,
                    entity_id=entity_id,
                    action=action,
                    field_name=field_name,
                    old_value=canonical_text(old_value),
                    new_value=canonical_text(new_value),
                    changed_by_id=actor.id,
                    changed_by_name=actor.name,
                ))
            self.store.commit()
            return True
        except SQLAlchemyError:
            self.store.rollback()
            logger.exception("Failed to record %s history for %s (%d rows)",
                             self.entity_type, entity_id, len(rows))
            return False
