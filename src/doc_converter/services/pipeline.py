"""Upload-to-response orchestration: convert every file, keep a history copy, assemble the response."""
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Sequence

from flask import current_app

from doc_converter.errors import PersistenceError, UnsupportedTypeError
from doc_converter.models import FileKind
from doc_converter.services.assembler import AssembledResult, ConvertedFile, assemble
from doc_converter.services.converters import convert_to_pdf
from doc_converter.services.history_store import history_store
from doc_converter.utils.file_utils import get_extension, pdf_display_name, remove_quietly, unique_filename


@dataclass(frozen=True)
class UploadedFile:
    """A file handed over by the upload layer, which owns and cleans up ``path``."""
    path: str
    original_filename: str


def _invalid_type_message() -> str:
    documents = ", ".join(FileKind.DOCUMENT.extensions)
    images = ", ".join(FileKind.IMAGE.extensions)
    return f"Invalid file type. Please upload {documents}, or image files ({images}) only"


def validate_uploads(files: Sequence[UploadedFile]) -> None:
    """Reject the whole batch if any file has an unsupported extension."""
    if not files:
        raise ValueError("No files uploaded. Please select at least one file.")
    for item in files:
        if FileKind.from_filename(item.original_filename) is None:
            raise UnsupportedTypeError(_invalid_type_message(), item.original_filename)


def _record_history(item: UploadedFile, pdf_path: str) -> None:
    try:
        stored_path = history_store.store_pdf(pdf_path)
    except PersistenceError as e:
        current_app.logger.error(f"Could not keep a history copy of {item.original_filename}: {e}")
        return
    try:
        history_store.record_conversion(
            item.original_filename,
            get_extension(item.original_filename),
            os.path.getsize(item.path),
            stored_path,
        )
    except PersistenceError as e:
        current_app.logger.error(f"History bookkeeping failed for {item.original_filename}: {e}", exc_info=True)
        remove_quietly(stored_path)


def convert_and_respond(files: Sequence[UploadedFile], work_dir: str | None = None) -> AssembledResult:
    """
    Convert every uploaded file to PDF and return one PDF or a ZIP of all of them.

    The batch is all-or-nothing: the first failed file aborts the request with
    its ConversionError. History is written only after every file converted;
    history failures are logged and never fail the response.
    """
    validate_uploads(files)
    work_dir = work_dir or current_app.config['UPLOAD_FOLDER']
    os.makedirs(work_dir, exist_ok=True)

    working_paths = []
    converted = []
    try:
        for item in files:
            input_path = os.path.abspath(os.path.join(work_dir, unique_filename(get_extension(item.original_filename))))
            output_path = os.path.abspath(os.path.join(work_dir, unique_filename('.pdf')))
            display_name = pdf_display_name(item.original_filename)
            current_app.logger.info(f"Processing file: '{item.original_filename}' -> '{display_name}'")

            shutil.copyfile(item.path, input_path)
            working_paths.extend([input_path, output_path])

            result = convert_to_pdf(input_path, output_path, item.original_filename)
            result.raise_for_error()
            converted.append((item, ConvertedFile(path=output_path, display_name=display_name)))

        for item, pdf in converted:
            _record_history(item, pdf.path)

        response = assemble([pdf for _, pdf in converted])
        current_app.logger.info(f"Sending {response.filename} ({len(response.data)} bytes)")
        return response
    finally:
        for path in working_paths:
            remove_quietly(path)
