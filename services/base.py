# services/base.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions.store import EntityStore
from utils.exceptions import BizError

logger = logging.getLogger(__name__)


class StoreService:
    """服务层基类：持有 EntityStore，统一 commit 的异常映射。"""

    def __init__(self, store: EntityStore):
        self.store = store

    def _commit(self, conflict_message: str = "Duplicate key"):
        """
        提交当前事务：
        - 唯一约束冲突 -> 409
        - 其它存储错误 -> 500，消息为底层异常信息
        """
        try:
            self.store.commit()
        except IntegrityError:
            self.store.rollback()
            logger.warning("Integrity error on commit: %s", conflict_message)
            raise BizError(conflict_message, 409)
        except SQLAlchemyError as exc:
            self.store.rollback()
            logger.exception("Store commit failed")
            raise BizError(str(getattr(exc, "orig", None) or exc), 500)
