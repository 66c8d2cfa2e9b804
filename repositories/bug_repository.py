# repositories/bug_repository.py
from __future__ import annotations

from typing import List, Mapping

from sqlalchemy import and_, or_, select

from constants.bug import BugStatus
from models.bug import Bug
from repositories.base import EntityRepository
from repositories.listing import FilteredListing
from utils.validators import parse_optional_bool


class BugRepository(EntityRepository[Bug]):
    model = Bug
    key_column = "bug_id"

    # show_deleted 未传时不过滤
    listing = FilteredListing(
        Bug,
        exact_fields=("status", "priority", "severity", "assignee_id", "module_id"),
    )

    def list(self, args: Mapping) -> List[Bug]:
        params = self.listing.params_from(args)
        extra = []
        show_rejected = parse_optional_bool(args.get("show_rejected"))
        if show_rejected is False:
            # 已删除的行（同时也是 Rejected）由 show_deleted 单独控制
            extra.append(or_(Bug.status != BugStatus.REJECTED.value, Bug.is_deleted.is_(True)))
        elif show_rejected is True:
            extra.append(and_(Bug.status == BugStatus.REJECTED.value, Bug.is_deleted.is_(False)))
        return self.scalars(self.listing.statement(params, extra))

    def list_linking_test(self, test_id: str) -> List[Bug]:
        pattern = f'%"{test_id}"%'
        stmt = (
            select(Bug)
            .where(Bug.linked_tests.like(pattern))
            .order_by(Bug.created_at.desc(), Bug.id.desc())
        )
        return self.scalars(stmt)
