# repositories/attachment_repository.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from models.attachment import Attachment
from repositories.base import EntityRepository


class AttachmentRepository(EntityRepository[Attachment]):
    """附件索引表的读写；磁盘文件由 AttachmentService 处理。"""

    model = Attachment
    key_column = "attachment_id"

    def list_for(self, target_type: str, target_id: str) -> List[Attachment]:
        stmt = (
            select(Attachment)
            .where(Attachment.target_type == target_type, Attachment.target_id == target_id)
            .order_by(Attachment.uploaded_at.desc(), Attachment.id.desc())
        )
        return self.scalars(stmt)

    def get_for(self, target_type: str, target_id: str, attachment_id: str) -> Optional[Attachment]:
        stmt = select(Attachment).where(
            Attachment.attachment_id == attachment_id,
            Attachment.target_type == target_type,
            Attachment.target_id == target_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()
