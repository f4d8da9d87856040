"""
Frame data structure for SpritePack.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, UnidentifiedImageError

from .errors import FrameDecodeError
from .rectangle import Rect


@dataclass
class FrameData:
    """A named source image together with its placement rectangle."""

    name: str
    image: Image.Image
    rect: Optional[Rect] = field(default=None)

    def __post_init__(self):
        """Size the rectangle from the image when none is given."""
        if self.rect is None:
            self.rect = Rect(self.image.width, self.image.height)

    @property
    def size(self):
        return self.image.size


def frame_from_png(name: str, source: Union[str, Path, BinaryIO]) -> FrameData:
    """
    Decode a PNG frame.

    Args:
        name: Frame name used as the key in the spritesheet JSON
        source: Path or binary file object holding PNG data

    Returns:
        FrameData with a straight-alpha RGBA image

    Raises:
        FrameDecodeError: If the source is not a decodable PNG
    """
    if isinstance(source, str):
        source = Path(source)

    try:
        with Image.open(source) as img:
            img_format = img.format
            img.load()
            if img_format != 'PNG':
                raise FrameDecodeError(f"{name}: expected PNG image (got {img_format})")
            image = img.convert('RGBA') if img.mode != 'RGBA' else img.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise FrameDecodeError(f"{name}: {e}") from e

    return FrameData(name, image)
