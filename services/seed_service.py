# services/seed_service.py
"""首次启动写入默认用户、模块与版本；每类数据仅在对应表为空时写入。"""
from __future__ import annotations

import logging

from flask import current_app

from constants.catalog import ModuleStatus, VersionStatus
from constants.roles import UserRole
from models.module import Module
from models.user import User
from models.version import Version
from repositories.module_repository import ModuleRepository
from repositories.user_repository import UserRepository
from repositories.version_repository import VersionRepository
from services.base import StoreService
from utils import json_fields
from utils.password import hash_password

logger = logging.getLogger(__name__)

SEED_AUTHOR = "System"

DEFAULT_MODULES = (
    ("MOD_INV", "Inventory Management", "Inventory, warehouse, and stock management", "Package"),
    ("MOD_PUR", "Purchases & Procurement", "Purchase orders, vendors, and procurement", "ShoppingCart"),
    ("MOD_SAL", "Sales & CRM", "Sales orders, customers, and CRM", "Users"),
    ("MOD_FIN", "Finance & Accounting", "Financial management and accounting", "Calculator"),
    ("MOD_BUD", "Budget & Planning", "Budget planning and financial forecasting", "DollarSign"),
    ("MOD_SYS", "System Administration", "System configuration and administration", "Shield"),
    ("MOD_INT", "Integration & Interfaces", "External integrations and API interfaces", "RefreshCw"),
)

DEFAULT_VERSIONS = (
    {
        "version_id": "VER_1_0_0",
        "version_number": "1.0.0",
        "version_name": "Initial Release",
        "description": "Initial version of DNA ERP system",
        "release_date": "2024-01-01",
        "status": VersionStatus.ARCHIVED.value,
        "is_current": False,
        "features": ["Core modules", "User management", "Basic reporting"],
        "bug_fixes": [],
        "known_issues": ["Performance optimization needed"],
    },
    {
        "version_id": "VER_1_1_0",
        "version_number": "1.1.0",
        "version_name": "Feature Update",
        "description": "Added inventory management and improved UI",
        "release_date": "2024-06-01",
        "status": VersionStatus.ACTIVE.value,
        "is_current": False,
        "features": ["Advanced inventory", "UI improvements", "API enhancements"],
        "bug_fixes": ["Fixed login issues", "Resolved data export bugs"],
        "known_issues": ["Minor UI glitches in reports"],
    },
    {
        "version_id": "VER_1_2_0",
        "version_number": "1.2.0",
        "version_name": "Current Release",
        "description": "Latest stable version with all features",
        "release_date": "2024-10-01",
        "status": VersionStatus.ACTIVE.value,
        "is_current": True,
        "features": ["Budget planning", "Enhanced security", "Mobile responsive"],
        "bug_fixes": ["Fixed calculation errors", "Improved performance"],
        "known_issues": [],
    },
)


class SeedService(StoreService):
    def __init__(self, store):
        super().__init__(store)
        self.users = UserRepository(store)
        self.modules = ModuleRepository(store)
        self.versions = VersionRepository(store)

    def seed_defaults(self) -> None:
        created = {
            "users": self._seed_users(),
            "modules": self._seed_modules(),
            "versions": self._seed_versions(),
        }
        self._commit()
        if any(created.values()):
            logger.info("Seeded default data: %s", created)

    def _seed_users(self) -> int:
        if self.users.count():
            return 0
        cfg = current_app.config
        accounts = (
            ("user-admin-001", cfg["ADMIN_INIT_EMAIL"], cfg["ADMIN_INIT_PASSWORD"], cfg["ADMIN_INIT_NAME"], UserRole.ADMIN),
            ("user-tester-001", cfg["TESTER_INIT_EMAIL"], cfg["TESTER_INIT_PASSWORD"], "Test User", UserRole.TESTER),
        )
        for user_id, email, password, name, role in accounts:
            self.users.add(User(
                user_id=user_id,
                email=email.lower(),
                password_hash=hash_password(password),
                name=name,
                role=role.value,
                is_active=True,
                created_by=SEED_AUTHOR,
            ))
        return len(accounts)

    def _seed_modules(self) -> int:
        if self.modules.count():
            return 0
        for order, (module_id, name, description, icon) in enumerate(DEFAULT_MODULES, start=1):
            self.modules.add(Module(
                module_id=module_id,
                name=name,
                description=description,
                icon=icon,
                display_order=order,
                status=ModuleStatus.ACTIVE.value,
                created_by=SEED_AUTHOR,
            ))
        return len(DEFAULT_MODULES)

    def _seed_versions(self) -> int:
        if self.versions.count():
            return 0
        for spec in DEFAULT_VERSIONS:
            data = dict(spec)
            for name in ("features", "bug_fixes", "known_issues"):
                data[name] = json_fields.encode(data[name])
            self.versions.add(Version(created_by=SEED_AUTHOR, **data))
        return len(DEFAULT_VERSIONS)
