"""Read side of the history store, as consumed by the HTTP layer and the CLI."""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from doc_converter.errors import ArtifactMissingError, NotFound
from doc_converter.services.history_store import history_store
from doc_converter.utils.file_utils import pdf_display_name


@dataclass(frozen=True)
class Artifact:
    data: bytes
    filename: str


def list_recent_history(limit: int | None = None) -> list[dict]:
    """Most recent conversions first, without their server-side storage paths."""
    return [record.to_dict() for record in history_store.list_recent(limit)]


def fetch_artifact(record_id: int) -> Artifact:
    """Load the stored PDF of a conversion.

    Raises:
        NotFound: no record with this id (never issued or already evicted).
        ArtifactMissingError: the record exists but its PDF is gone.
    """
    record = history_store.get_by_id(record_id)
    if record is None:
        current_app.logger.info(f"Conversion {record_id} not found")
        raise NotFound(f"Conversion {record_id} not found")

    path = record.stored_pdf_path
    filename = pdf_display_name(record.original_filename)
    if not path:
        current_app.logger.warning(f"Conversion {record_id} has no stored PDF")
        raise ArtifactMissingError(record_id, path)

    try:
        with open(path, 'rb') as f:
            data = f.read()
    except FileNotFoundError:
        # A concurrent upload may have evicted the record after the lookup
        if history_store.get_by_id(record_id, refresh=True) is None:
            current_app.logger.info(f"Conversion {record_id} was evicted while being fetched")
            raise NotFound(f"Conversion {record_id} not found") from None
        current_app.logger.warning(f"Stored PDF missing for conversion {record_id}: {path}")
        raise ArtifactMissingError(record_id, path) from None
    return Artifact(data=data, filename=filename)
