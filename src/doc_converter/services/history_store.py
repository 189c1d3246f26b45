"""Bounded history of successful conversions.

Each record points at a durable copy of the produced PDF under the storage
directory. After every insert the store keeps only the newest
``retention`` records and deletes the PDFs of the ones it drops.
"""
import logging
import os
import shutil
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from doc_converter.errors import PersistenceError
from doc_converter.extensions import db
from doc_converter.models import ConversionRecord

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 5


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class HistoryStore:

    def __init__(self, storage_dir=None, retention=DEFAULT_RETENTION):
        self.storage_dir = storage_dir
        self.retention = retention
        self._initialized = False
        # Serializes insert + eviction across request threads
        self._write_lock = threading.Lock()

    def init_app(self, app):
        """Create the storage directory and the schema. Must run before any other call."""
        self.storage_dir = os.path.abspath(app.config.get('PDF_STORAGE_DIR') or self.storage_dir or 'pdf-storage')
        self.retention = int(app.config.get('HISTORY_RETENTION', self.retention))
        os.makedirs(self.storage_dir, exist_ok=True)
        with app.app_context():
            db.create_all()
        app.extensions['history_store'] = self
        self._initialized = True
        app.logger.info(f"History store initialized (retention={self.retention}, storage={self.storage_dir})")

    def _require_initialized(self):
        if not self._initialized:
            raise RuntimeError("HistoryStore used before init_app()")

    def store_pdf(self, pdf_path: str) -> str:
        """Copy a converted PDF into the storage directory under a fresh random name."""
        self._require_initialized()
        stored_path = os.path.join(self.storage_dir, f"{uuid.uuid4()}.pdf")
        try:
            shutil.copyfile(pdf_path, stored_path)
        except OSError as e:
            raise PersistenceError(f"Could not copy {pdf_path} to storage: {e}") from e
        return stored_path

    def record_conversion(self, original_filename: str, extension: str, size_bytes: int,
                          stored_pdf_path: str | None) -> ConversionRecord:
        """Insert a record for a finished conversion and evict beyond the retention window.

        The insert and the eviction commit together. Stored PDFs of evicted
        records are deleted only once that commit went through.

        Raises:
            PersistenceError: the database rejected the insert or the eviction.
        """
        self._require_initialized()
        with self._write_lock:
            try:
                record = ConversionRecord(
                    original_filename=original_filename,
                    original_extension=(extension or '').lower(),
                    file_size=max(int(size_bytes or 0), 0),
                    stored_pdf_path=stored_pdf_path,
                    converted_at=_now_iso(),
                )
                db.session.add(record)
                db.session.flush()
                record_id = record.id
                evicted = self._stage_eviction()
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                raise PersistenceError(f"Failed to record conversion of {original_filename}: {e}") from e

            logger.info("Recorded conversion %s: %s", record_id, original_filename)
            self._finish_eviction(evicted)
            return record

    def evict_beyond_retention(self) -> list[int]:
        """Delete every record outside the newest ``retention`` ones, with its stored PDF.

        A PDF that cannot be deleted is logged and its record is removed anyway.
        Returns the evicted ids.
        """
        self._require_initialized()
        with self._write_lock:
            try:
                evicted = self._stage_eviction()
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                raise PersistenceError(f"Failed to evict old conversions: {e}") from e
            return self._finish_eviction(evicted)

    def _stage_eviction(self) -> list[tuple[int, str | None]]:
        """Delete the stale rows in the current transaction; returns their (id, stored path)."""
        keep_ids = db.session.execute(
            select(ConversionRecord.id).order_by(ConversionRecord.id.desc()).limit(self.retention)
        ).scalars().all()
        stale = db.session.execute(
            select(ConversionRecord).where(ConversionRecord.id.not_in(keep_ids))
        ).scalars().all()

        evicted = []
        for record in stale:
            evicted.append((record.id, record.stored_pdf_path))
            db.session.delete(record)
        db.session.flush()
        return evicted

    def _finish_eviction(self, evicted: list[tuple[int, str | None]]) -> list[int]:
        for record_id, path in evicted:
            self._delete_stored_pdf(record_id, path)
        if evicted:
            logger.info("Evicted %d old conversion(s): %s", len(evicted), [rid for rid, _ in evicted])
        return [rid for rid, _ in evicted]

    @staticmethod
    def _delete_stored_pdf(record_id: int, path: str | None) -> None:
        if not path:
            return
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete stored PDF %s of conversion %s: %s", path, record_id, e)

    def list_recent(self, limit: int | None = None) -> list[ConversionRecord]:
        """Newest records first, at most ``limit`` (defaults to the retention window)."""
        self._require_initialized()
        limit = self.retention if limit is None else limit
        return list(db.session.execute(
            select(ConversionRecord).order_by(ConversionRecord.id.desc()).limit(limit)
        ).scalars())

    def get_by_id(self, record_id: int, refresh: bool = False) -> ConversionRecord | None:
        """Look up one record; ``refresh`` bypasses the session's cached copy."""
        self._require_initialized()
        return db.session.get(ConversionRecord, record_id, populate_existing=refresh)

    def count(self) -> int:
        self._require_initialized()
        return db.session.query(ConversionRecord).count()


history_store = HistoryStore()
