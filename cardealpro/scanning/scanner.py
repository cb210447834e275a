"""Driver's-license scanning: OCR engine output fed through the license parser."""

import logging
from dataclasses import dataclass, field

from cardealpro.llm import OcrEngine
from cardealpro.scanning.license_parser import parse_ohio_license

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")


class UnsupportedImageError(ValueError):
    """Raised when a scan is attempted on a non-image upload."""


@dataclass
class ScanResult:
    raw_text: str
    fields: dict[str, str] = field(default_factory=dict)


class LicenseScanner:
    """Recognizes a license image and parses identity fields from the text."""

    def __init__(self, engine: OcrEngine) -> None:
        self._engine = engine

    async def scan(self, image: bytes, mime_type: str = "image/jpeg") -> ScanResult:
        if mime_type not in SUPPORTED_IMAGE_TYPES:
            raise UnsupportedImageError(
                f"Unsupported image type {mime_type!r}; expected one of {SUPPORTED_IMAGE_TYPES}"
            )
        text = await self._engine.recognize(image, mime_type)
        fields = parse_ohio_license(text)
        logger.info("License scan recognized %d field(s)", len(fields))
        return ScanResult(raw_text=text, fields=fields)
