import os
import re
import uuid
from flask import current_app

_CONVERTIBLE_SUFFIX = re.compile(r'\.(doc|docx|jpg|jpeg|png|gif|bmp)$', re.IGNORECASE)


def get_extension(filename):
    """Lower-cased extension including the dot, or '' when there is none."""
    return os.path.splitext(filename or '')[1].lower()


def pdf_display_name(original_filename):
    """'Report.DOCX' -> 'Report.pdf'; names without a convertible suffix get '.pdf' appended."""
    name = os.path.basename(original_filename or '') or 'document'
    if _CONVERTIBLE_SUFFIX.search(name):
        return _CONVERTIBLE_SUFFIX.sub('.pdf', name)
    if name.lower().endswith('.pdf'):
        return name
    return f"{name}.pdf"


def unique_filename(extension):
    """Random file name with the given extension (e.g. '.png')."""
    return f"{uuid.uuid4()}{extension}"


def remove_quietly(path):
    """Delete a working file, logging instead of raising when that fails."""
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        current_app.logger.warning(f"Error deleting file {path}: {e}")
