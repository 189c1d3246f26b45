from flask import current_app

from doc_converter.extensions import office_engine


def convert_document_to_pdf(input_path: str, output_path: str) -> None:
    """Convert a .doc/.docx file to PDF with the shared LibreOffice engine.

    The engine is started lazily on first use.

    Raises:
        EngineStartError: the engine could not be started.
        EngineConversionError: LibreOffice failed on this document.
    """
    office_engine.ensure_started()
    current_app.logger.info(f"Converting document {input_path} -> {output_path}")
    office_engine.convert(input_path, output_path)
    current_app.logger.info(f"Document conversion finished: {output_path}")
