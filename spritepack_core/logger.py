"""
Logging system for SpritePack.
Handles run logging with timestamps and pack statistics.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple


def setup_logging(log_level: int = logging.INFO) -> None:
    """Setup basic logging configuration."""
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def log_pack_run(log_path: Path, sheet_name: str, timestamp: datetime,
                 max_size: Tuple[int, int], power_of_two: bool, square: bool,
                 extrude: int, num_frames: int, output_path: Optional[Path],
                 final_size: Tuple[int, int], occupancy: float, process_time: float,
                 frames_placed: int, error: Optional[str] = None) -> None:
    """
    Log complete pack run information to file.

    Args:
        log_path: Path to log file
        sheet_name: Name of the spritesheet
        timestamp: Start timestamp
        max_size: Maximum sheet dimensions (width, height)
        power_of_two: Whether sheet sides were kept at powers of two
        square: Whether the sheet was kept square
        extrude: Edge extrusion in pixels
        num_frames: Number of input frames
        output_path: Path to output PNG
        final_size: Final sheet dimensions (width, height)
        occupancy: Fraction of the sheet covered by frames
        process_time: Processing time in seconds
        frames_placed: Number of frames successfully placed
        error: Error message if any
    """

    log_content = f"""SpritePack - Pack Log
{'=' * 50}

Sheet Information:
    Sheet Name: {sheet_name}
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}

Input Parameters:
    Max Sheet Size: {max_size[0]} x {max_size[1]} pixels
    Power Of Two: {"yes" if power_of_two else "no"}
    Square: {"yes" if square else "no"}
    Extrude: {extrude} px
    Input Frames: {num_frames}
    Frames Placed: {frames_placed}

Output Information:
    Output Path: {output_path.name if output_path else "-"}
    Final Sheet Size: {final_size[0]} x {final_size[1]} pixels
    Occupancy: {occupancy * 100:.1f}%

Process Information:
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

"""

    if error:
        log_content += f"""Error Information:
    Error: {error}
    Status: FAILED

"""

    status = "SUCCESS" if not error and frames_placed == num_frames else "PARTIAL" if frames_placed > 0 else "FAILED"

    log_content += f"""Summary:
    Sheet: {sheet_name}
    Frames Packed: {frames_placed}/{num_frames}
    Final Status: {status}

"""

    try:
        with open(log_path, 'w', encoding='utf-8') as f:
            f.write(log_content)
    except OSError as e:
        logger = logging.getLogger(__name__)
        logger.error(f"Failed to write log file {log_path}: {e}")


def generate_log_filename(sheet_name: str) -> str:
    """
    Generate standardized log filename.

    Args:
        sheet_name: Name of the spritesheet

    Returns:
        Formatted log filename
    """
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{sheet_name}_{timestamp}.log"


def generate_sheet_filename(sheet_name: str, extension: str) -> str:
    """Generate a sheet output filename such as 'ui.png' or 'ui.json'."""
    return f"{sheet_name}.{extension.lstrip('.')}"
