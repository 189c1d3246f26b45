from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from typing import Sequence

PDF_CONTENT_TYPE = 'application/pdf'
ZIP_CONTENT_TYPE = 'application/zip'
ZIP_FILENAME = 'converted-documents.zip'


@dataclass(frozen=True)
class ConvertedFile:
    path: str
    display_name: str


@dataclass(frozen=True)
class AssembledResult:
    content_type: str
    data: bytes
    filename: str


def create_zip(files: Sequence[ConvertedFile]) -> bytes:
    """Bundle PDFs into an in-memory ZIP, one entry per file named after its display name.

    Entries are written in order; a repeated display name keeps the last file.
    """
    latest = {}
    for item in files:
        latest.pop(item.display_name, None)
        latest[item.display_name] = item.path

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for name, path in latest.items():
            zf.write(path, arcname=name)
    return buffer.getvalue()


def assemble(files: Sequence[ConvertedFile]) -> AssembledResult:
    """Return a single PDF as-is, or a ZIP archive when there are several."""
    if not files:
        raise ValueError("assemble() needs at least one converted file")

    if len(files) == 1:
        only = files[0]
        with open(only.path, 'rb') as f:
            data = f.read()
        return AssembledResult(content_type=PDF_CONTENT_TYPE, data=data, filename=only.display_name)

    return AssembledResult(content_type=ZIP_CONTENT_TYPE, data=create_zip(files), filename=ZIP_FILENAME)
