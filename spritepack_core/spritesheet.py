"""
Spritesheet JSON frame map for SpritePack.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from .frame_data import FrameData


def build_json(frames: List[FrameData], metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the spritesheet document.

    Args:
        frames: Placed frames
        metadata: Free-form data stored under "meta"

    Returns:
        {"frames": {name: {"frame": {"x", "y", "w", "h"}}}, "meta": metadata}
    """
    document = {
        'frames': {},
        'meta': dict(metadata) if metadata else {},
    }

    for frame in frames:
        width, height = frame.size
        document['frames'][frame.name] = {
            'frame': {
                'x': frame.rect.x,
                'y': frame.rect.y,
                'w': width,
                'h': height,
            }
        }

    return document


def write_json(document: Dict[str, Any], out: Union[str, Path, TextIO], indent: Optional[int] = None) -> None:
    """Write the document as UTF-8 JSON followed by a newline."""
    if isinstance(out, (str, Path)):
        with open(out, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=indent)
            f.write('\n')
    else:
        json.dump(document, out, indent=indent)
        out.write('\n')
