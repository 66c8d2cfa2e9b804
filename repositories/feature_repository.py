# repositories/feature_repository.py
from __future__ import annotations

from typing import List, Mapping, Optional

from sqlalchemy import or_, select

from models.feature import Feature
from models.dependency import FeatureDependency
from repositories.base import EntityRepository
from repositories.listing import FilteredListing


class FeatureRepository(EntityRepository[Feature]):
    """
    功能规划仓储。
    - 列表默认隐藏已删除（show_deleted 未传视为 false）
    - 依赖边 FeatureDependency 也放在这里维护
    """

    model = Feature
    key_column = "feature_id"

    listing = FilteredListing(
        Feature,
        exact_fields=("status", "priority", "module_id", "target_version", "owner_id", "feature_type"),
        default_deleted_mode="false",
    )

    def list(self, args: Mapping) -> List[Feature]:
        params = self.listing.params_from(args)
        return self.scalars(self.listing.statement(params))

    def list_by_version(self, version_id: str) -> List[Feature]:
        stmt = (
            select(Feature)
            .where(Feature.target_version == version_id, Feature.is_deleted.is_(False))
            .order_by(Feature.priority.asc(), Feature.created_at.desc(), Feature.id.desc())
        )
        return self.scalars(stmt)

    def list_by_module(self, module_id: str) -> List[Feature]:
        stmt = (
            select(Feature)
            .where(Feature.module_id == module_id, Feature.is_deleted.is_(False))
            .order_by(Feature.priority.asc(), Feature.created_at.desc(), Feature.id.desc())
        )
        return self.scalars(stmt)

    def list_linking_test(self, test_id: str) -> List[Feature]:
        """linked_tests（JSON 文本）中包含该 test_id 的未删除功能。"""
        pattern = f'%"{test_id}"%'
        stmt = (
            select(Feature)
            .where(Feature.linked_tests.like(pattern), Feature.is_deleted.is_(False))
            .order_by(Feature.created_at.desc(), Feature.id.desc())
        )
        return self.scalars(stmt)

    # ---------- 依赖 ----------
    def list_dependencies(self, feature_id: str) -> List[FeatureDependency]:
        stmt = (
            select(FeatureDependency)
            .where(or_(
                FeatureDependency.feature_id == feature_id,
                FeatureDependency.depends_on_feature_id == feature_id,
            ))
            .order_by(FeatureDependency.created_at.desc(), FeatureDependency.id.desc())
        )
        return self.scalars(stmt)

    def get_dependency(self, feature_id: str, dependency_id: int) -> Optional[FeatureDependency]:
        stmt = select(FeatureDependency).where(
            FeatureDependency.id == dependency_id,
            FeatureDependency.feature_id == feature_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def add_dependency(self, dependency: FeatureDependency) -> FeatureDependency:
        self.session.add(dependency)
        return dependency
