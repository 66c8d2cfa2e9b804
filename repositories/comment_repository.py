# repositories/comment_repository.py
from typing import List

from sqlalchemy import select

from models.comment import Comment
from repositories.base import EntityRepository


class CommentRepository(EntityRepository[Comment]):
    model = Comment
    key_column = "id"

    def list_for(self, target_type: str, target_id: str) -> List[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.target_type == target_type, Comment.target_id == target_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return self.scalars(stmt)
