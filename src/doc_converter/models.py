import enum
import os

from sqlalchemy import Column, Integer, String, Text, BigInteger
from doc_converter.extensions import db


class FileKind(enum.Enum):
    """Conversion strategy selected for an upload, decided by its extension."""
    DOCUMENT = 'document'
    IMAGE = 'image'

    @classmethod
    def from_filename(cls, filename):
        """Return the kind for ``filename`` or None when the extension is not supported."""
        ext = os.path.splitext(filename or '')[1].lstrip('.').lower()
        return _KINDS_BY_EXTENSION.get(ext)

    @property
    def extensions(self):
        return tuple(f".{ext}" for ext, kind in _KINDS_BY_EXTENSION.items() if kind is self)


_KINDS_BY_EXTENSION = {
    'doc': FileKind.DOCUMENT,
    'docx': FileKind.DOCUMENT,
    'jpg': FileKind.IMAGE,
    'jpeg': FileKind.IMAGE,
    'png': FileKind.IMAGE,
    'gif': FileKind.IMAGE,
    'bmp': FileKind.IMAGE,
}


class ConversionRecord(db.Model):
    __tablename__ = 'conversions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    original_filename = Column(String(255), nullable=False)
    original_extension = Column(String(20), nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    stored_pdf_path = Column(Text, unique=True)
    converted_at = Column(String(32), nullable=False)  # ISO-8601

    # AUTOINCREMENT keeps ids from being reused after eviction
    __table_args__ = {'sqlite_autoincrement': True}

    def to_dict(self):
        """Public view of the record; the stored path stays server-side."""
        return {
            'id': self.id,
            'filename': self.original_filename,
            'original_extension': self.original_extension,
            'file_size': self.file_size,
            'converted_at': self.converted_at,
        }

    def __repr__(self):
        return f"<ConversionRecord {self.id} {self.original_filename!r}>"
