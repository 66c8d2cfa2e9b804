# repositories/base.py
from __future__ import annotations

from typing import Generic, Optional, TypeVar

from sqlalchemy import func, select

from extensions.store import EntityStore

ModelT = TypeVar("ModelT")


class EntityRepository(Generic[ModelT]):
    """
    单实体仓储的公共部分。
    - 构造时注入 EntityStore，不直接引用全局 db.session
    - 写操作只 add / delete，不 commit；事务边界由服务层决定
    """

    model = None
    key_column = None  # 业务主键列名，例如 "bug_id"

    def __init__(self, store: EntityStore):
        self.store = store

    @property
    def session(self):
        return self.store.session

    def get(self, key) -> Optional[ModelT]:
        column = getattr(self.model, self.key_column)
        return self.session.execute(select(self.model).where(column == key)).scalar_one_or_none()

    def exists(self, key) -> bool:
        column = getattr(self.model, self.key_column)
        stmt = select(func.count()).select_from(self.model).where(column == key)
        return (self.session.execute(stmt).scalar() or 0) > 0

    def add(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.session.delete(entity)

    def scalars(self, stmt) -> list[ModelT]:
        return list(self.session.execute(stmt).scalars().all())
