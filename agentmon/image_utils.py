import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from .errors import UpstreamFormatError
from .utils import get_logger

LOGGER = get_logger(__name__)

# Standard trading card ratio, width:height.
CARD_ASPECT = 5 / 7


@dataclass
class CardImage:
    """A decoded card render, re-encoded as PNG."""

    png: bytes
    width: int
    height: int
    source_format: str

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 0.0

    def to_data_url(self) -> str:
        b64 = base64.b64encode(self.png).decode("ascii")
        return f"data:image/png;base64,{b64}"

    def save(self, path: Path) -> Path:
        path.write_bytes(self.png)
        return path


def load_card_image(payload: Union[bytes, str]) -> CardImage:
    """Decode raw bytes (or a base64 string) from the image generator.

    Raises :class:`UpstreamFormatError` when the payload is not an image.
    """
    data = base64.b64decode(payload) if isinstance(payload, str) else payload

    try:
        with Image.open(io.BytesIO(data)) as img:
            source_format = img.format or "UNKNOWN"
            img = img.convert("RGBA") if img.mode in ("P", "LA", "RGBA") else img.convert("RGB")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG", optimize=True)
            width, height = img.size
    except (UnidentifiedImageError, OSError) as exc:
        raise UpstreamFormatError("Image generator returned data that is not an image.", raw_text="") from exc

    image = CardImage(png=buffer.getvalue(), width=width, height=height, source_format=source_format)
    if not image.is_portrait:
        LOGGER.warning("Card image is %dx%d, expected portrait orientation", width, height)
    elif abs(image.aspect_ratio - CARD_ASPECT) > 0.1:
        LOGGER.debug("Card image aspect %.3f differs from %.3f", image.aspect_ratio, CARD_ASPECT)
    return image
