# repositories/module_repository.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select, update

from models.module import Module
from models.test_case import TestCase
from repositories.base import EntityRepository
from utils.datetime_helpers import utc_now


class ModuleRepository(EntityRepository[Module]):
    model = Module
    key_column = "module_id"

    def list_by_status(self, status: Optional[str]) -> List[Module]:
        """status 为 None 时返回全部；按名称排序。"""
        stmt = select(Module)
        if status:
            stmt = stmt.where(Module.status == status)
        stmt = stmt.order_by(Module.name.asc(), Module.id.asc())
        return self.scalars(stmt)

    def count_tests_referencing(self, module: Module) -> int:
        """测试用例按模块名称关联（不是 module_id）。"""
        stmt = select(func.count()).select_from(TestCase).where(TestCase.module == module.name)
        return self.session.execute(stmt).scalar() or 0

    def set_display_order(self, module_id: str, display_order: int) -> int:
        result = self.session.execute(
            update(Module)
            .where(Module.module_id == module_id)
            .values(display_order=display_order, updated_at=utc_now())
        )
        return result.rowcount or 0

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(Module)).scalar() or 0
