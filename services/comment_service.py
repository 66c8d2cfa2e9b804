# services/comment_service.py
from __future__ import annotations

import logging
from typing import List

from models.comment import Comment
from repositories.comment_repository import CommentRepository
from services.base import StoreService
from utils.exceptions import BizError, missing_fields_error
from utils.validators import coerce_bool, missing_required

logger = logging.getLogger(__name__)


class CommentService(StoreService):
    """缺陷与功能规划共用的评论；target_type 区分归属。"""

    def __init__(self, store, target_type: str, required=("comment_text",)):
        super().__init__(store)
        self.target_type = target_type
        self.required = tuple(required)
        self.repo = CommentRepository(store)

    def list(self, target_id: str) -> List[Comment]:
        return self.repo.list_for(self.target_type, target_id)

    def add(self, target_id: str, data: dict) -> Comment:
        missing = missing_required(data, *self.required)
        if missing:
            raise missing_fields_error(missing)
        text = data.get("comment_text")
        if not isinstance(text, str):
            raise BizError("comment_text must be a string", 400)
        comment = Comment(
            target_type=self.target_type,
            target_id=target_id,
            comment_text=text,
            author_id=data.get("author_id"),
            author_name=data.get("author_name"),
            author_email=data.get("author_email"),
            is_internal=coerce_bool(data.get("is_internal")),
        )
        self.repo.add(comment)
        self._commit()
        logger.info("Comment %s added to %s %s", comment.id, self.target_type, target_id)
        return comment
