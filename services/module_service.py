# services/module_service.py
from __future__ import annotations

import logging
from typing import List

from constants.catalog import (
    DEFAULT_MODULE_ICON, DEFAULT_MODULE_ORDER, ModuleStatus, validate_module_status,
)
from constants.field_descriptors import MODULE
from models.module import Module
from repositories.module_repository import ModuleRepository
from services.base import StoreService
from services.update_builder import UpdateBuilder
from utils.exceptions import BizError, missing_fields_error
from utils.ids import generate_module_id
from utils.validators import missing_required

logger = logging.getLogger(__name__)


class ModuleService(StoreService):
    def __init__(self, store):
        super().__init__(store)
        self.repo = ModuleRepository(store)
        self.builder = UpdateBuilder(MODULE)

    def list(self, status: str = ModuleStatus.ACTIVE.value) -> List[Module]:
        """status=all 返回全部，缺省只看 active。"""
        if status == "all":
            return self.repo.list_by_status(None)
        validate_module_status(status)
        return self.repo.list_by_status(status)

    def get(self, module_id: str) -> Module:
        module = self.repo.get(module_id)
        if not module:
            raise BizError("Module not found", 404)
        return module

    def create(self, data: dict) -> Module:
        missing = missing_required(data, "name")
        if missing:
            raise missing_fields_error(missing)

        module_id = (data.get("module_id") or "").strip() or generate_module_id()
        if self.repo.exists(module_id):
            raise BizError("Module ID already exists", 409)

        status = data.get("status") or ModuleStatus.ACTIVE.value
        validate_module_status(status)

        module = Module(
            module_id=module_id,
            name=data["name"].strip(),
            description=data.get("description"),
            icon=data.get("icon") or DEFAULT_MODULE_ICON,
            display_order=self._order(data.get("display_order"), DEFAULT_MODULE_ORDER),
            status=status,
            created_by=data.get("created_by"),
        )
        self.repo.add(module)
        self._commit("Module ID already exists")
        logger.info("Module created: %s", module_id)
        return module

    def update(self, module_id: str, data: dict) -> Module:
        module = self.get(module_id)
        if data.get("status") is not None:
            validate_module_status(data["status"])
        if data.get("display_order") is not None:
            data = {**data, "display_order": self._order(data["display_order"], module.display_order)}
        assignments = self.builder.build(data)
        self.builder.apply(module, assignments)
        self._commit()
        return module

    def delete(self, module_id: str) -> Module:
        """软删除（status=inactive）；仍有用例按名称引用时拒绝。"""
        module = self.get(module_id)
        in_use = self.repo.count_tests_referencing(module)
        if in_use:
            raise BizError(f"Cannot delete module: {in_use} test(s) still reference it", 409)
        module.status = ModuleStatus.INACTIVE.value
        self._commit()
        logger.info("Module deactivated: %s", module_id)
        return module

    def reorder(self, items) -> int:
        if not isinstance(items, list) or not items:
            raise BizError("modules must be a non-empty array", 400)
        updated = 0
        for item in items:
            if not isinstance(item, dict) or not item.get("module_id"):
                raise BizError("Each entry needs module_id and display_order", 400)
            updated += self.repo.set_display_order(
                item["module_id"], self._order(item.get("display_order"), DEFAULT_MODULE_ORDER)
            )
        self._commit()
        return updated

    @staticmethod
    def _order(raw, default: int) -> int:
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise BizError("display_order must be an integer", 400)
