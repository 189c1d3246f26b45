import io
import os
import zipfile

import pytest
from sqlalchemy.exc import OperationalError

from doc_converter.errors import ImageDecodeError, PersistenceError, UnsupportedTypeError
from doc_converter.services.history_store import history_store
from doc_converter.services.pipeline import UploadedFile, convert_and_respond
from doc_converter.utils.file_utils import pdf_display_name


def _working_files(app):
    return os.listdir(app.config['UPLOAD_FOLDER'])


def test_single_image_returns_pdf_and_records_history(app, app_context, make_image):
    source = make_image('holiday.PNG')

    result = convert_and_respond([UploadedFile(path=source, original_filename='holiday.PNG')])

    assert result.content_type == 'application/pdf'
    assert result.filename == 'holiday.pdf'
    assert result.data.startswith(b'%PDF')

    records = history_store.list_recent()
    assert len(records) == 1
    assert records[0].original_filename == 'holiday.PNG'
    assert records[0].original_extension == '.png'
    assert records[0].file_size == os.path.getsize(source)
    assert os.path.exists(records[0].stored_pdf_path)
    assert _working_files(app) == []
    # caller-owned input is untouched
    assert os.path.exists(source)


def test_multiple_files_return_zip(app, app_context, make_image):
    files = [
        UploadedFile(path=make_image('a.jpg'), original_filename='a.jpg'),
        UploadedFile(path=make_image('b.bmp'), original_filename='b.bmp'),
    ]

    result = convert_and_respond(files)

    assert result.content_type == 'application/zip'
    assert result.filename == 'converted-documents.zip'
    with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
        assert sorted(zf.namelist()) == ['a.pdf', 'b.pdf']
    assert history_store.count() == 2
    assert _working_files(app) == []


def test_unsupported_file_rejects_whole_batch(app_context, make_image):
    files = [
        UploadedFile(path=make_image('ok.png'), original_filename='ok.png'),
        UploadedFile(path=make_image('ok2.png'), original_filename='bundle.zip'),
    ]

    with pytest.raises(UnsupportedTypeError) as excinfo:
        convert_and_respond(files)
    assert excinfo.value.filename == 'bundle.zip'
    assert str(excinfo.value) == ('Invalid file type. Please upload .doc, .docx, or image files '
                                  '(.jpg, .jpeg, .png, .gif, .bmp) only')
    assert history_store.count() == 0


def test_empty_upload_is_rejected(app_context):
    with pytest.raises(ValueError):
        convert_and_respond([])


def test_one_failure_aborts_batch_without_history(app, app_context, make_image, tmp_path):
    broken = tmp_path / 'broken.png'
    broken.write_bytes(b'not an image')
    files = [
        UploadedFile(path=make_image('fine.png'), original_filename='fine.png'),
        UploadedFile(path=str(broken), original_filename='broken.png'),
    ]

    with pytest.raises(ImageDecodeError) as excinfo:
        convert_and_respond(files)

    assert excinfo.value.filename == 'broken.png'
    assert app.config['UPLOAD_FOLDER'] not in str(excinfo.value)
    assert history_store.count() == 0
    assert os.listdir(history_store.storage_dir) == []
    assert _working_files(app) == []


def test_history_failure_does_not_fail_response(app_context, make_image, monkeypatch):
    def broken_record(*args, **kwargs):
        raise PersistenceError('database is locked')

    monkeypatch.setattr(history_store, 'record_conversion', broken_record)
    source = make_image('scan.gif', mode='P')

    result = convert_and_respond([UploadedFile(path=source, original_filename='scan.gif')])

    assert result.content_type == 'application/pdf'
    assert result.filename == 'scan.pdf'
    # the orphaned storage copy is cleaned up
    assert os.listdir(history_store.storage_dir) == []


def test_failed_eviction_leaves_no_dangling_record(app_context, make_image, monkeypatch):
    def failing_eviction():
        raise OperationalError('DELETE FROM conversions', {}, Exception('database is locked'))

    monkeypatch.setattr(history_store, '_stage_eviction', failing_eviction)
    source = make_image('a.png')

    result = convert_and_respond([UploadedFile(path=source, original_filename='a.png')])

    assert result.content_type == 'application/pdf'
    assert history_store.count() == 0
    assert os.listdir(history_store.storage_dir) == []


@pytest.mark.parametrize('original,expected', [
    ('Report.DOCX', 'Report.pdf'),
    ('letter.doc', 'letter.pdf'),
    ('photo.JPEG', 'photo.pdf'),
    ('archive.v2.png', 'archive.v2.pdf'),
    ('notes', 'notes.pdf'),
])
def test_pdf_display_name(original, expected):
    assert pdf_display_name(original) == expected
