"""Exception hierarchy shared by the conversion pipeline and the history store."""


class DocConverterError(Exception):
    """Base class for all application errors."""


class ConversionError(DocConverterError):
    """A single input file could not be turned into a PDF."""

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.filename = filename


class UnsupportedTypeError(ConversionError):
    pass


class EngineStartError(ConversionError):
    pass


class EngineConversionError(ConversionError):
    pass


class ImageDecodeError(ConversionError):
    pass


class PdfWriteError(ConversionError):
    pass


class PersistenceError(DocConverterError):
    """History bookkeeping failed; the conversion itself is unaffected."""


class NotFound(DocConverterError):
    """No history record exists for the requested id."""


class ArtifactMissingError(DocConverterError):
    """A history record exists but its stored PDF is gone from disk."""

    def __init__(self, record_id: int, path: str | None):
        super().__init__(f"Stored PDF for conversion {record_id} is missing: {path}")
        self.record_id = record_id
        self.path = path
