"""Raster image to single-page PDF conversion.

The page is sized to the image's pixel dimensions (one pixel per PDF point)
and the image is drawn at the origin without scaling.
"""
import os
from flask import current_app
from PIL import Image, UnidentifiedImageError

from doc_converter.errors import ImageDecodeError, PdfWriteError

# One pixel maps to one point (1/72 inch)
PDF_RESOLUTION = 72.0

# Modes Pillow can embed in a PDF as-is
_PDF_MODES = {'1', 'L', 'RGB', 'CMYK'}

# Transparent areas are composited onto white, as a viewer shows them on paper
_PAGE_BACKGROUND = (255, 255, 255)


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ('RGBA', 'LA', 'PA') or (img.mode == 'P' and 'transparency' in img.info)


def _flatten(img: Image.Image) -> Image.Image:
    rgba = img.convert('RGBA')
    page = Image.new('RGB', rgba.size, _PAGE_BACKGROUND)
    page.paste(rgba, mask=rgba.getchannel('A'))
    return page


def _load_image(file_path: str) -> Image.Image:
    try:
        with Image.open(file_path) as img:
            img.load()
            if _has_alpha(img):
                return _flatten(img)
            if img.mode not in _PDF_MODES:
                return img.convert('RGB')
            return img.copy()
    except UnidentifiedImageError as e:
        # Pillow's message embeds the working path
        raise ImageDecodeError("Failed to read image file: unrecognized image data") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"Failed to read image file: {e}") from e


def convert_image_to_pdf(input_path: str, output_path: str) -> None:
    """Write ``input_path`` as a one-page PDF at ``output_path``.

    Raises:
        ImageDecodeError: the image is corrupt or in an unreadable format.
        PdfWriteError: the PDF could not be written.
    """
    image = _load_image(input_path)
    width, height = image.size
    current_app.logger.info(f"Creating PDF page {width}x{height} from {image.mode} image")
    try:
        image.save(output_path, 'PDF', resolution=PDF_RESOLUTION)
    except (OSError, ValueError) as e:
        raise PdfWriteError(f"Failed to write PDF: {e}") from e
    finally:
        image.close()

    if not os.path.exists(output_path):
        raise PdfWriteError("PDF file was not created")
    current_app.logger.info(f"Image conversion completed. PDF size: {os.path.getsize(output_path)} bytes")
