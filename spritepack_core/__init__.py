"""
SpritePack Core Package
MaxRects packing of image frames into spritesheets.
"""

from .rectangle import Rect
from .packer import MaxRectsBin, PackHeuristic
from .errors import (
    AggregateError,
    ErrorGroup,
    FrameDecodeError,
    InvalidConfigurationError,
    PlacementError,
    SpritePackError,
    UnsupportedOperationError,
)
from .frame_data import FrameData, frame_from_png
from .renderer import OutputMode, SpritesheetRenderer, draw_extruded
from .sheet_packer import PackResult, SheetSpec, SingleBinPacker
from .spritesheet import build_json, write_json

__all__ = [
    'Rect',
    'MaxRectsBin',
    'PackHeuristic',
    'AggregateError',
    'ErrorGroup',
    'FrameDecodeError',
    'InvalidConfigurationError',
    'PlacementError',
    'SpritePackError',
    'UnsupportedOperationError',
    'FrameData',
    'frame_from_png',
    'OutputMode',
    'SpritesheetRenderer',
    'draw_extruded',
    'PackResult',
    'SheetSpec',
    'SingleBinPacker',
    'build_json',
    'write_json',
]
