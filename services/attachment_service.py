# -*- coding: utf-8 -*-
"""
attachment_service.py
--------------------------------------------------------------------
缺陷 / 功能规划附件：
- 文件落盘到 <upload_dir>/<kind>s/，数据库 attachments 表只存索引
- 单次最多 UPLOAD_MAX_FILES 个文件，单个不超过 UPLOAD_MAX_FILE_BYTES，
  扩展名必须在 UPLOAD_ALLOWED_EXTENSIONS 中
- 任一文件校验失败整批拒绝；入库失败时清理本批已写入的文件
"""

from __future__ import annotations

import logging
import mimetypes
import os
from typing import List, Optional, Sequence

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from models.attachment import Attachment
from repositories.attachment_repository import AttachmentRepository
from services.base import StoreService
from services.history_service import Actor
from utils.exceptions import BizError
from utils.ids import generate_id, stored_file_name

logger = logging.getLogger(__name__)


def safe_join(root: str, relative: str) -> Optional[str]:
    """root 下的绝对路径；越出 root 返回 None。"""
    root_abs = os.path.abspath(root)
    normalized = os.path.normpath(relative).lstrip(os.sep)
    target = os.path.abspath(os.path.join(root_abs, normalized))
    if not target.startswith(root_abs + os.sep):
        return None
    return target


def _extension(filename: str) -> str:
    _, ext = os.path.splitext(filename or "")
    return ext.lower()


def _stream_size(file: FileStorage) -> int:
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


class AttachmentService(StoreService):
    def __init__(self, store, kind: str):
        super().__init__(store)
        self.kind = kind  # bug / feature
        self.repo = AttachmentRepository(store)

    @property
    def directory(self) -> str:
        if not self.store.uploads_available():
            raise BizError("File storage is not available", 500)
        path = os.path.join(self.store.upload_dir, f"{self.kind}s")
        os.makedirs(path, exist_ok=True)
        return path

    def list(self, target_id: str) -> List[Attachment]:
        return self.repo.list_for(self.kind, target_id)

    def _validate(self, files: Sequence[FileStorage]):
        cfg = current_app.config
        files = [f for f in files if f and f.filename]
        if not files:
            raise BizError("No files uploaded", 400)
        if len(files) > cfg["UPLOAD_MAX_FILES"]:
            raise BizError(f"Too many files: at most {cfg['UPLOAD_MAX_FILES']} per request", 400)

        allowed = cfg["UPLOAD_ALLOWED_EXTENSIONS"]
        max_bytes = cfg["UPLOAD_MAX_FILE_BYTES"]
        for file in files:
            ext = _extension(file.filename).lstrip(".")
            if ext not in allowed:
                raise BizError(f"File type not allowed: {file.filename}", 400)
            if _stream_size(file) > max_bytes:
                raise BizError(f"File too large: {file.filename}", 413)
        return files

    def save(self, target_id: str, files: Sequence[FileStorage], actor: Actor) -> List[Attachment]:
        """写盘 + 写索引（不 commit，由调用方与父实体一起提交）。"""
        files = self._validate(files)
        directory = self.directory
        written: List[str] = []
        rows: List[Attachment] = []
        try:
            for file in files:
                original = file.filename
                ext = _extension(secure_filename(original) or original)
                filename = stored_file_name(self.kind, ext)
                target = os.path.join(directory, filename)
                file.save(target)
                written.append(target)
                rows.append(self.repo.add(Attachment(
                    attachment_id=generate_id("ATT"),
                    target_type=self.kind,
                    target_id=target_id,
                    filename=filename,
                    original_name=original,
                    mimetype=file.mimetype or mimetypes.guess_type(original)[0],
                    size=os.path.getsize(target),
                    path=f"/uploads/{self.kind}s/{filename}",
                    uploaded_by_id=actor.id,
                    uploaded_by_name=actor.name,
                )))
        except OSError:
            logger.exception("Failed to store %s attachments for %s", self.kind, target_id)
            self.discard_files(written)
            raise BizError("Failed to store uploaded files", 500)
        return rows

    def commit_or_cleanup(self, rows: Sequence[Attachment]):
        try:
            self._commit()
        except BizError:
            self.discard_files(self.disk_path(row) for row in rows)
            raise

    def get(self, target_id: str, attachment_id: str) -> Attachment:
        row = self.repo.get_for(self.kind, target_id, attachment_id)
        if not row:
            raise BizError("Attachment not found", 404)
        return row

    def remove(self, row: Attachment):
        """删索引 + 删文件（文件缺失只记警告）。"""
        path = self.disk_path(row)
        self.repo.delete(row)
        if path:
            self.discard_files([path])

    def disk_path(self, row: Attachment) -> Optional[str]:
        if not self.store.upload_dir:
            return None
        return safe_join(self.store.upload_dir, os.path.join(f"{self.kind}s", row.filename))

    @staticmethod
    def discard_files(paths):
        for path in paths:
            if not path:
                continue
            try:
                os.remove(path)
            except FileNotFoundError:
                logger.warning("Attachment file already missing: %s", path)
            except OSError:
                logger.exception("Could not remove attachment file %s", path)


def attachment_payload(row: Attachment) -> dict:
    return {
        "attachment_id": row.attachment_id,
        "filename": row.filename,
        "original_name": row.original_name,
        "mimetype": row.mimetype,
        "size": row.size,
        "path": row.path,
    }
