# repositories/listing.py
"""
通用过滤列表：把一组可选查询参数拼成 select() 的 WHERE / ORDER BY / LIMIT。

- 精确匹配字段（status / priority / module_id ...）：参数为空或为 "all" 时忽略
- search：title / description 不区分大小写的子串匹配
- 软删除可见性 show_deleted：
    "false" -> 只看未删除
    "true"  -> 只看已删除
    "all" / 未传 -> 不过滤（实体可通过 default_deleted_mode 改变未传时的行为）
- limit / offset 分页（limit 默认 100，上限由配置 LIST_MAX_LIMIT 控制）
所有条件之间为 AND。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from flask import current_app
from sqlalchemy import Select, or_, select

from utils.exceptions import BizError

ALL = "all"
DEFAULT_LIMIT = 100


@dataclass
class ListingParams:
    filters: dict[str, Any] = field(default_factory=dict)
    search: Optional[str] = None
    show_deleted: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0

    @classmethod
    def from_args(cls, args: Mapping[str, Any], exact_fields: Iterable[str]) -> "ListingParams":
        """从 request.args 一类的映射中取出列表参数。"""
        filters = {}
        for name in exact_fields:
            value = args.get(name)
            if value not in (None, "", ALL):
                filters[name] = value
        return cls(
            filters=filters,
            search=(args.get("search") or "").strip() or None,
            show_deleted=args.get("show_deleted"),
            limit=_parse_int(args.get("limit"), "limit"),
            offset=_parse_int(args.get("offset"), "offset") or 0,
        )


def _parse_int(raw, name) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise BizError(f"{name} must be an integer", 400)
    if value < 0:
        raise BizError(f"{name} must not be negative", 400)
    return value


def deleted_condition(column, mode: Optional[str]):
    """show_deleted 三态 -> 条件；不过滤时返回 None。"""
    if mode is None:
        return None
    mode = str(mode).strip().lower()
    if mode == "false":
        return or_(column.is_(False), column.is_(None))
    if mode in ("true", "only"):
        return column.is_(True)
    return None


class FilteredListing:
    """
    单实体列表查询构造器。

    用法：
        listing = FilteredListing(Bug, exact_fields=("status", "priority"))
        stmt = listing.statement(params)
    """

    def __init__(
            self,
            model,
            *,
            exact_fields: Sequence[str] = (),
            search_fields: Sequence[str] = ("title", "description"),
            deleted_column: Optional[str] = "is_deleted",
            default_deleted_mode: Optional[str] = None,
            order_by: Sequence[Any] = (),
            paginate: bool = True,
    ):
        self.model = model
        self.exact_fields = tuple(exact_fields)
        self.search_fields = tuple(search_fields)
        self.deleted_column = deleted_column
        self.default_deleted_mode = default_deleted_mode
        self.order_by = tuple(order_by) or (model.created_at.desc(), model.id.desc())
        self.paginate = paginate

    def params_from(self, args: Mapping[str, Any]) -> ListingParams:
        return ListingParams.from_args(args, self.exact_fields)

    def conditions(self, params: ListingParams, extra: Iterable[Any] = ()) -> list:
        conditions = []
        for name, value in params.filters.items():
            if name not in self.exact_fields:
                continue
            conditions.append(getattr(self.model, name) == value)

        if params.search and self.search_fields:
            pattern = f"%{params.search}%"
            conditions.append(or_(*[getattr(self.model, name).ilike(pattern) for name in self.search_fields]))

        if self.deleted_column:
            mode = params.show_deleted if params.show_deleted is not None else self.default_deleted_mode
            cond = deleted_condition(getattr(self.model, self.deleted_column), mode)
            if cond is not None:
                conditions.append(cond)

        conditions.extend(extra)
        return conditions

    def statement(self, params: ListingParams, extra: Iterable[Any] = ()) -> Select:
        stmt = select(self.model)
        conditions = self.conditions(params, extra)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(*self.order_by)
        if self.paginate:
            stmt = stmt.limit(self._limit(params.limit)).offset(params.offset or 0)
        return stmt

    @staticmethod
    def _limit(requested: Optional[int]) -> int:
        cfg = current_app.config
        default = cfg.get("LIST_DEFAULT_LIMIT", DEFAULT_LIMIT)
        ceiling = cfg.get("LIST_MAX_LIMIT", 1000)
        if requested is None:
            return default
        return min(requested, ceiling)
