import os
import uuid
from pathlib import Path
from types import SimpleNamespace

import pytest

from doc_converter.errors import ArtifactMissingError, NotFound
from doc_converter.services.history_service import fetch_artifact, list_recent_history
from doc_converter.services.history_store import history_store


def _add(name):
    path = Path(history_store.storage_dir) / f"{uuid.uuid4()}.pdf"
    path.write_bytes(b'%PDF-1.4 ' + name.encode())
    return history_store.record_conversion(name, os.path.splitext(name)[1], 10, str(path))


def test_fetch_artifact_returns_bytes_and_pdf_name(app_context):
    record = _add('Quarterly Report.DOCX')

    artifact = fetch_artifact(record.id)

    assert artifact.data == b'%PDF-1.4 Quarterly Report.DOCX'
    assert artifact.filename == 'Quarterly Report.pdf'


def test_never_issued_id_is_not_found(app_context):
    with pytest.raises(NotFound):
        fetch_artifact(12345)


def test_evicted_id_is_not_found(app_context):
    first_id = _add('first.png').id
    for i in range(5):
        _add(f'next{i}.png')

    with pytest.raises(NotFound):
        fetch_artifact(first_id)


def test_deleted_file_is_artifact_missing(app_context):
    record = _add('photo.jpg')
    os.remove(record.stored_pdf_path)

    assert history_store.get_by_id(record.id) is not None
    with pytest.raises(ArtifactMissingError) as excinfo:
        fetch_artifact(record.id)
    assert excinfo.value.record_id == record.id


def test_record_evicted_during_fetch_is_not_found(app_context, monkeypatch):
    record = _add('old.png')
    looked_up = SimpleNamespace(id=record.id, stored_pdf_path=record.stored_pdf_path,
                                original_filename=record.original_filename)
    real_get = history_store.get_by_id

    def get_then_evict(record_id, refresh=False):
        if refresh:
            return real_get(record_id, refresh=True)
        # a burst of uploads evicts the record right after it was looked up
        for i in range(5):
            _add(f'new{i}.png')
        return looked_up

    monkeypatch.setattr(history_store, 'get_by_id', get_then_evict)

    with pytest.raises(NotFound):
        fetch_artifact(looked_up.id)
    assert not Path(looked_up.stored_pdf_path).exists()


def test_history_listing_hides_storage_path(app_context):
    _add('a.png')
    _add('b.docx')

    entries = list_recent_history()

    assert [e['filename'] for e in entries] == ['b.docx', 'a.png']
    assert entries[0]['original_extension'] == '.docx'
    assert all('stored_pdf_path' not in e for e in entries)
    assert set(entries[0]) == {'id', 'filename', 'original_extension', 'file_size', 'converted_at'}


def test_history_listing_empty(app_context):
    assert list_recent_history() == []
