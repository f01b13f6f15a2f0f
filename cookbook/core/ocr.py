"""
OCR
Reads recipe text off photos with Tesseract
"""

import logging
from typing import Any, Callable, Iterable

import pytesseract
from PIL import Image, UnidentifiedImageError

from cookbook.config import OCR_LANG
from cookbook.core.errors import UpstreamError

logger = logging.getLogger(__name__)


def recognize_image(image: Any, lang: str = OCR_LANG) -> str:
    """Run OCR on one image (a path, file object or PIL image)"""
    try:
        img = image if isinstance(image, Image.Image) else Image.open(image)
        return pytesseract.image_to_string(img, lang=lang)
    except UnidentifiedImageError as e:
        raise UpstreamError(f"Unreadable image: {e}") from e
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
        raise UpstreamError(f"OCR failed: {e}") from e


def recognize_images(
    images: Iterable[Any],
    recognize: Callable[[Any], str] = recognize_image
) -> str:
    """OCR images one by one and join the text in input order, blank line between"""
    texts = []
    for index, image in enumerate(images):
        text = recognize(image)
        logger.info("OCR image %d: %d characters", index + 1, len(text))
        texts.append(text.strip())
    return "\n\n".join(texts)
