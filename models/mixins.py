# models/mixins.py
from datetime import date, datetime

from sqlalchemy import func, DateTime

from extensions.database import db
from constants.field_descriptors import FieldKind
from utils import json_fields
from utils.datetime_helpers import utc_now

COMMON_TABLE_ARGS = {
    "mysql_engine": "InnoDB",
    "mysql_charset": "utf8mb4",
    "mysql_collate": "utf8mb4_unicode_ci",
}


class TimestampMixin:
    created_at = db.Column(DateTime, nullable=False, default=utc_now, server_default=func.now(), index=True)
    updated_at = db.Column(DateTime, nullable=False, default=utc_now, server_default=func.now(),
                           onupdate=utc_now)


class SoftDeleteMixin:
    """软删除混入类：行保留在库里，只翻转 is_deleted"""
    is_deleted = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default="0",
        index=True,
        comment="是否已删除"
    )

    def soft_delete(self):
        self.is_deleted = True


class DescribedMixin:
    """
    按实体字段表序列化：
    - JSON 列解码（容错，永远不会抛）
    - 布尔列统一输出 True/False
    - datetime / date 输出 ISO 字符串
    子类通过 __descriptor__ 指定字段表，__hidden__ 指定不输出的列。
    """
    __descriptor__ = None
    __hidden__ = ()

    def to_dict(self, exclude=()):
        descriptor = self.__descriptor__
        data = {}
        for column in self.__table__.columns:
            name = column.key
            if name in self.__hidden__ or name in exclude:
                continue
            value = getattr(self, name)
            spec = descriptor.spec_for(name) if descriptor is not None else None
            if spec is not None and spec.kind is FieldKind.JSON:
                value = json_fields.decode(value, spec.fallback())
            elif spec is not None and spec.kind is FieldKind.BOOLEAN:
                value = bool(value)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            data[name] = value
        return data
