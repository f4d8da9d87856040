"""
Single-bin spritesheet packer for SpritePack.
Decodes frames, packs them with the MaxRects engine, and writes the PNG and JSON outputs.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Sequence, TextIO, Union

from .errors import ErrorGroup, InvalidConfigurationError
from .frame_data import FrameData, frame_from_png
from .logger import generate_log_filename, generate_sheet_filename, log_pack_run
from .packer import MaxRectsBin, PackHeuristic
from .renderer import OutputMode, SpritesheetRenderer, check_extrude
from .spritesheet import build_json, write_json


@dataclass
class SheetSpec:
    """Spritesheet packing configuration."""
    max_width: int = 4096
    max_height: int = 4096
    power_of_two: bool = True
    square: bool = False
    extrude: int = 0  # Edge replication in pixels (0 or 1)
    mode: OutputMode = OutputMode.OPTIMAL
    heuristic: PackHeuristic = PackHeuristic.MAX_EDGE

    def __post_init__(self):
        """Validate sizes and normalize enum values given as strings."""
        if isinstance(self.mode, str):
            self.mode = _coerce_enum(OutputMode, self.mode, 'mode')
        if isinstance(self.heuristic, str):
            self.heuristic = _coerce_enum(PackHeuristic, self.heuristic, 'heuristic')

        if not isinstance(self.max_width, int) or self.max_width <= 0:
            raise InvalidConfigurationError(f"max_width must be a positive integer (got {self.max_width!r})")
        if not isinstance(self.max_height, int) or self.max_height <= 0:
            raise InvalidConfigurationError(f"max_height must be a positive integer (got {self.max_height!r})")
        if not isinstance(self.extrude, int) or self.extrude < 0:
            raise InvalidConfigurationError(f"extrude must be a non-negative integer (got {self.extrude!r})")


def _coerce_enum(enum_type, value: str, name: str):
    try:
        return enum_type(value.lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        raise InvalidConfigurationError(f"Unknown {name} '{value}' (expected one of: {choices})") from None


@dataclass
class PackResult:
    """Result of a spritesheet pack."""
    width: int
    height: int
    frames: List[FrameData]
    document: Dict[str, Any]
    placement_count: int
    occupancy: float = 0.0
    image_path: Optional[Path] = field(default=None)
    json_path: Optional[Path] = field(default=None)


class SingleBinPacker:
    """Packs frames into a single spritesheet."""

    def __init__(self, spec: Optional[SheetSpec] = None):
        """
        Initialize packer with a sheet configuration.

        Args:
            spec: Sheet configuration (defaults to SheetSpec())
        """
        self.spec = spec or SheetSpec()
        self.renderer = SpritesheetRenderer()
        self.logger = logging.getLogger(__name__)

    def new_bin(self) -> MaxRectsBin:
        """Create a growing bin whose padding and border leave room for extrusion."""
        spec = self.spec
        return MaxRectsBin(
            spec.max_width, spec.max_height,
            padding=2 * spec.extrude,
            border=spec.extrude,
            growth_enabled=True,
            power_of_two=spec.power_of_two,
            square=spec.square,
            heuristic=spec.heuristic,
        )

    def decode_frames(self, frame_names: Sequence[str],
                      frame_sources: Sequence[Union[str, Path, BinaryIO]]) -> List[FrameData]:
        """
        Decode every frame source on its own thread.

        All workers run to completion; failures are reported together.

        Raises:
            InvalidConfigurationError: If names and sources differ in length
            AggregateError: If any frame failed to decode
        """
        if len(frame_names) != len(frame_sources):
            raise InvalidConfigurationError(
                f"mismatch between frame names ({len(frame_names)}) and frame sources ({len(frame_sources)})"
            )

        frames: List[Optional[FrameData]] = [None] * len(frame_sources)
        errors = ErrorGroup()

        def worker(index: int, name: str, source):
            try:
                frames[index] = frame_from_png(name, source)
            except Exception as e:
                errors.add(e)

        threads = [
            threading.Thread(target=worker, args=(i, name, source), daemon=True)
            for i, (name, source) in enumerate(zip(frame_names, frame_sources))
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if not errors.empty():
            self.logger.error(f"{len(errors)} of {len(frame_sources)} frames failed to decode")
            raise errors.collect()

        return frames

    def pack(self, frame_names: Sequence[str], frame_sources: Sequence[Union[str, Path, BinaryIO]],
             metadata: Optional[Dict[str, Any]], out_image: Union[str, Path, BinaryIO],
             out_json: Union[str, Path, TextIO]) -> PackResult:
        """
        Pack frames into a spritesheet.

        Frame names and frame sources must have the same length and order.

        Args:
            frame_names: Frame names used as JSON keys
            frame_sources: PNG paths or binary streams
            metadata: Free-form data stored under "meta"
            out_image: Destination of the spritesheet PNG
            out_json: Destination of the spritesheet JSON

        Returns:
            PackResult describing the sheet

        Raises:
            InvalidConfigurationError: If the inputs are malformed
            UnsupportedOperationError: If extrude is greater than 1
            AggregateError: If frames failed to decode
            PlacementError: If the frames do not fit the maximum sheet size
        """
        if len(frame_names) != len(frame_sources):
            raise InvalidConfigurationError(
                f"mismatch between frame names ({len(frame_names)}) and frame sources ({len(frame_sources)})"
            )
        check_extrude(self.spec.extrude)
        if not frame_names:
            raise InvalidConfigurationError("no frames to pack")

        self.logger.info(f"Packing {len(frame_names)} frames (max {self.spec.max_width}x{self.spec.max_height})")

        frames = self.decode_frames(frame_names, frame_sources)

        sheet_bin = self.new_bin()
        sheet_bin.place_all([frame.rect for frame in frames])
        self.logger.info(f"Packed {sheet_bin.placement_count} frames into {sheet_bin.width}x{sheet_bin.height} "
                         f"({sheet_bin.occupancy() * 100:.1f}% occupied)")

        document = build_json(frames, metadata)

        canvas = self.renderer.render(frames, sheet_bin.width, sheet_bin.height, self.spec.extrude)
        self.renderer.save_png(canvas, out_image, self.spec.mode)

        indent = 4 if self.spec.mode == OutputMode.FAST else None
        write_json(document, out_json, indent=indent)

        return PackResult(
            width=sheet_bin.width,
            height=sheet_bin.height,
            frames=frames,
            document=document,
            placement_count=sheet_bin.placement_count,
            occupancy=sheet_bin.occupancy(),
        )

    def pack_files(self, paths: Sequence[Union[str, Path]], output_dir: Union[str, Path], sheet_name: str,
                   metadata: Optional[Dict[str, Any]] = None) -> PackResult:
        """
        Pack PNG files into <sheet_name>.png and <sheet_name>.json in output_dir.

        Frames are named by file stem. A run log is written next to the
        outputs, including for failed runs.

        Args:
            paths: PNG files to pack
            output_dir: Output directory (created if missing)
            sheet_name: Base name of the outputs
            metadata: Free-form data stored under "meta"

        Returns:
            PackResult with image_path and json_path set
        """
        paths = [Path(p) for p in paths]
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        names = [p.stem for p in paths]
        if len(set(names)) != len(names):
            raise InvalidConfigurationError(f"Duplicate frame names in {sheet_name}")

        image_path = output_dir / generate_sheet_filename(sheet_name, 'png')
        json_path = output_dir / generate_sheet_filename(sheet_name, 'json')
        log_path = output_dir / generate_log_filename(sheet_name)

        start_time = datetime.now()
        started = time.perf_counter()
        spec = self.spec

        try:
            result = self.pack(names, paths, metadata, image_path, json_path)
        except Exception as e:
            self.logger.error(f"Error packing {sheet_name}: {e}")
            log_pack_run(
                log_path=log_path,
                sheet_name=sheet_name,
                timestamp=start_time,
                max_size=(spec.max_width, spec.max_height),
                power_of_two=spec.power_of_two,
                square=spec.square,
                extrude=spec.extrude,
                num_frames=len(paths),
                output_path=None,
                final_size=(0, 0),
                occupancy=0.0,
                process_time=time.perf_counter() - started,
                frames_placed=0,
                error=str(e)
            )
            raise

        result.image_path = image_path
        result.json_path = json_path

        log_pack_run(
            log_path=log_path,
            sheet_name=sheet_name,
            timestamp=start_time,
            max_size=(spec.max_width, spec.max_height),
            power_of_two=spec.power_of_two,
            square=spec.square,
            extrude=spec.extrude,
            num_frames=len(paths),
            output_path=image_path,
            final_size=(result.width, result.height),
            occupancy=result.occupancy,
            process_time=time.perf_counter() - started,
            frames_placed=result.placement_count
        )

        self.logger.info(f"Spritesheet completed: {image_path} ({result.placement_count} frames)")
        return result
