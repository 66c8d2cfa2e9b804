"""Entity store: explicit lifecycle wrapper around the SQLAlchemy binding."""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

EXTENSION_KEY = "entity_store"


class EntityStore:
    """Per-application handle to the relational store and the upload directory.

    Constructed by the app factory and passed to services and repositories;
    nothing in the code base reaches for a module-level connection.
    """

    def __init__(self, database: SQLAlchemy) -> None:
        self._db = database
        self._app = None
        self.upload_dir: Optional[str] = None

    def init_app(self, app) -> None:
        self._app = app
        self._db.init_app(app)
        self.upload_dir = self._resolve_upload_dir(app)
        app.extensions[EXTENSION_KEY] = self

        if app.config.get("AUTO_CREATE_TABLES"):
            with app.app_context():
                import models  # noqa: F401  注册全部模型
                self._db.create_all()
                if app.config.get("SEED_DEFAULTS"):
                    from services.seed_service import SeedService
                    SeedService(self).seed_defaults()
        logger.info("Entity store ready (upload dir: %s)", self.upload_dir)

    @staticmethod
    def _resolve_upload_dir(app) -> Optional[str]:
        for candidate in (app.config.get("UPLOAD_PREFERRED_DIR"), app.config.get("ATTACHMENT_STORAGE_DIR")):
            if not candidate:
                continue
            try:
                os.makedirs(candidate, exist_ok=True)
                probe = os.path.join(candidate, ".write-test")
                with open(probe, "w", encoding="utf-8") as fh:
                    fh.write("ok")
                os.remove(probe)
                return os.path.abspath(candidate)
            except OSError as exc:
                logger.warning("Upload dir %s not writable: %s", candidate, exc)
        logger.error("No writable upload directory; attachments are disabled")
        return None

    @property
    def session(self) -> Session:
        return self._db.session

    def commit(self) -> None:
        self._db.session.commit()

    def rollback(self) -> None:
        self._db.session.rollback()

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """All-or-nothing unit of work: commit on success, roll back on any error."""
        session = self._db.session
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    def ping(self) -> bool:
        try:
            self._db.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Store ping failed")
            self._db.session.rollback()
            return False

    def uploads_available(self) -> bool:
        return bool(self.upload_dir) and os.path.isdir(self.upload_dir)

    def close(self) -> None:
        """Release pooled connections; safe to call more than once."""
        if self._app is None:
            return
        with self._app.app_context():
            self._db.session.remove()
            self._db.engine.dispose()
        logger.info("Entity store closed")


def get_store() -> EntityStore:
    store = current_app.extensions.get(EXTENSION_KEY)
    if store is None:
        raise RuntimeError("Entity store is not initialized")
    return store


__all__ = ["EntityStore", "get_store"]
