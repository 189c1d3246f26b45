import os
import logging

from doc_converter.errors import ConversionError, UnsupportedTypeError
from doc_converter.models import FileKind
from doc_converter.services.conversion_result import ConversionResult
from doc_converter.services.doc_converter import convert_document_to_pdf
from doc_converter.services.image_converter import convert_image_to_pdf
from doc_converter.services.registry import register, get_handler

logger = logging.getLogger(__name__)


@register(FileKind.DOCUMENT)
def _convert_document(input_path: str, output_path: str) -> None:
    convert_document_to_pdf(input_path, output_path)


@register(FileKind.IMAGE)
def _convert_image(input_path: str, output_path: str) -> None:
    convert_image_to_pdf(input_path, output_path)


def classify(filename: str) -> FileKind:
    """Return the conversion strategy for ``filename`` or raise UnsupportedTypeError."""
    kind = FileKind.from_filename(filename)
    if kind is None:
        raise UnsupportedTypeError(f"Unsupported file type: {filename}", filename)
    return kind


def convert_to_pdf(input_path: str, output_path: str, declared_filename: str | None = None) -> ConversionResult:
    """
    Converts a document or image to PDF, choosing the strategy from the declared
    filename's extension (falling back to the input path).

    Never raises for conversion problems; the failure is returned in the result.
    A partially written output file is left in place for the caller to remove.
    """
    filename = declared_filename or os.path.basename(input_path)
    try:
        kind = classify(filename)
    except UnsupportedTypeError as e:
        logger.warning("Rejected %s: %s", filename, e)
        return ConversionResult.failed(e)

    handler = get_handler(kind)
    logger.debug("Routing %s to %s converter", filename, kind.value)
    try:
        handler(input_path, output_path)
    except ConversionError as e:
        # strategies only see the working copy
        e.filename = filename
        logger.error("Conversion of %s failed: %s", filename, e, exc_info=True)
        return ConversionResult.failed(e)
    return ConversionResult.ok(output_path)
