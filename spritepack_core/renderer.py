"""
Rendering engine for SpritePack.
Draws placed frames into the spritesheet canvas and encodes it as PNG.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from PIL import Image

from .errors import ErrorGroup, InvalidConfigurationError, UnsupportedOperationError
from .frame_data import FrameData


class OutputMode(Enum):
    """Trade-off between output size and encoding speed."""
    OPTIMAL = "optimal"
    FAST = "fast"


PNG_COMPRESS_LEVELS = {
    OutputMode.OPTIMAL: 9,
    OutputMode.FAST: 1,
}


def check_extrude(extrude: int) -> None:
    """
    Validate an extrusion width.

    Raises:
        InvalidConfigurationError: If extrude is negative
        UnsupportedOperationError: If extrude is greater than 1
    """
    if extrude < 0:
        raise InvalidConfigurationError(f"extrude must be non-negative (got {extrude})")
    if extrude > 1:
        raise UnsupportedOperationError(f"extrude > 1 not yet implemented (got {extrude})")


def draw_extruded(dst: Image.Image, position: Tuple[int, int], src: Image.Image, extrude: int) -> None:
    """
    Copy src into dst at position, replacing the destination pixels.

    With extrude == 1 the outermost rows, columns and corner pixels of src
    are repeated one pixel outside the frame.

    Args:
        dst: Destination canvas
        position: Top-left corner of the frame in dst
        src: Source frame
        extrude: Edge replication width (0 or 1)
    """
    check_extrude(extrude)

    x, y = position
    width, height = src.size

    dst.paste(src, (x, y))

    if extrude > 0:
        # Top, bottom, left and right edges
        dst.paste(src.crop((0, 0, width, 1)), (x, y - 1))
        dst.paste(src.crop((0, height - 1, width, height)), (x, y + height))
        dst.paste(src.crop((0, 0, 1, height)), (x - 1, y))
        dst.paste(src.crop((width - 1, 0, width, height)), (x + width, y))

        # Corners (TL, TR, BL, BR)
        dst.putpixel((x - 1, y - 1), src.getpixel((0, 0)))
        dst.putpixel((x + width, y - 1), src.getpixel((width - 1, 0)))
        dst.putpixel((x - 1, y + height), src.getpixel((0, height - 1)))
        dst.putpixel((x + width, y + height), src.getpixel((width - 1, height - 1)))


class SpritesheetRenderer:
    """Handles canvas rendering for SpritePack."""

    def __init__(self):
        """Initialize the renderer."""
        self.logger = logging.getLogger(__name__)

    def render(self, frames: List[FrameData], width: int, height: int, extrude: int = 0) -> Image.Image:
        """
        Draw every frame into a transparent canvas.

        Frames are drawn concurrently, one thread per frame. Placed frames
        never overlap, so the workers share the canvas without locking.

        Args:
            frames: Frames with their final positions
            width: Canvas width (final bin width)
            height: Canvas height (final bin height)
            extrude: Edge replication width

        Returns:
            RGBA canvas

        Raises:
            AggregateError: If any frame failed to draw
        """
        check_extrude(extrude)

        self.logger.info(f"Rendering {len(frames)} frames into {width}x{height} canvas")
        canvas = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        errors = ErrorGroup()

        def worker(frame: FrameData):
            try:
                draw_extruded(canvas, (frame.rect.x, frame.rect.y), frame.image, extrude)
            except Exception as e:
                errors.add(e)

        threads = [threading.Thread(target=worker, args=(frame,), daemon=True) for frame in frames]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if not errors.empty():
            self.logger.error(f"Failed to draw {len(errors)} of {len(frames)} frames")
            raise errors.collect()

        return canvas

    def save_png(self, canvas: Image.Image, out: Union[str, Path, BinaryIO],
                 mode: OutputMode = OutputMode.OPTIMAL) -> None:
        """
        Encode the canvas as PNG.

        Args:
            canvas: Rendered canvas
            out: Output path or binary stream
            mode: OPTIMAL for best compression, FAST for fastest encoding
        """
        compress_level = PNG_COMPRESS_LEVELS[mode]
        canvas.save(out, format='PNG', compress_level=compress_level)
        self.logger.info(f"Spritesheet PNG written ({canvas.width}x{canvas.height}, compress_level={compress_level})")
