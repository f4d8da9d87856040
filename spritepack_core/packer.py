"""
MaxRects packing engine for SpritePack.
Places rectangles into a bin that grows on demand under POT/square/max-size constraints.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .errors import InvalidConfigurationError, PlacementError
from .rectangle import Rect


class PackHeuristic(Enum):
    """Scoring rule used to choose a free region."""
    MAX_AREA = "max_area"  # least leftover area
    MAX_EDGE = "max_edge"  # least slack on the tighter side


# A successful growth always exposes a band large enough for the rectangle
# that triggered it, so one growth per placement is expected.
MAX_GROWTH_PASSES = 2


def next_power_of_two(value: int) -> int:
    """Round value up to a power of two. Zero and negatives map to 0."""
    if value <= 0:
        return 0
    return 1 << (value - 1).bit_length()


class MaxRectsBin:
    """
    Single MaxRects bin with incremental growth.

    The bin is not thread-safe: every placement mutates the free-region list
    and the container size in place.
    """

    def __init__(self, max_width: int, max_height: int, padding: int = 0, border: int = 0,
                 growth_enabled: bool = True, power_of_two: bool = True, square: bool = True,
                 heuristic: PackHeuristic = PackHeuristic.MAX_EDGE):
        """
        Initialize the bin.

        Args:
            max_width: Maximum container width in pixels
            max_height: Maximum container height in pixels
            padding: Gap reserved around every placed rectangle
            border: Inset reserved at the container edges
            growth_enabled: Grow the container on demand; when False the
                container is fixed at the maximum size
            power_of_two: Keep container sides at powers of two
            square: Keep container width and height equal
            heuristic: Free-region scoring rule
        """
        for name, value in (('max_width', max_width), ('max_height', max_height)):
            if not isinstance(value, int) or value <= 0:
                raise InvalidConfigurationError(f"{name} must be a positive integer (got {value!r})")
        for name, value in (('padding', padding), ('border', border)):
            if not isinstance(value, int) or value < 0:
                raise InvalidConfigurationError(f"{name} must be a non-negative integer (got {value!r})")
        if not isinstance(heuristic, PackHeuristic):
            raise InvalidConfigurationError(f"Unsupported heuristic: {heuristic!r}")

        self.max_width = max_width
        self.max_height = max_height
        self.padding = padding
        self.border = border
        self.growth_enabled = growth_enabled
        self.power_of_two = power_of_two
        self.square = square
        self.heuristic = heuristic

        if growth_enabled:
            self.width, self.height = 0, 0
        else:
            self.width, self.height = max_width, max_height

        self._free_regions: List[Rect] = [
            Rect(max_width + padding - border * 2, max_height + padding - border * 2, border, border)
        ]
        self._wider_than_tall = False
        self._stage = Rect(self.width, self.height)
        self._used_area = 0
        self.placement_count = 0

        self.logger = logging.getLogger(__name__)

    @property
    def free_regions(self) -> Tuple[Rect, ...]:
        return tuple(replace(region) for region in self._free_regions)

    def occupancy(self) -> float:
        """Fraction of the realized container covered by placed footprints."""
        container_area = self.width * self.height
        if container_area == 0:
            return 0.0
        return min(1.0, self._used_area / container_area)

    def place_all(self, rects: Iterable[Rect]) -> None:
        """
        Place rectangles largest side first.

        The caller's sequence is not reordered; each rectangle receives its
        position in place. Placements made before a failure are kept.

        Args:
            rects: Rectangles to place

        Raises:
            InvalidConfigurationError: If any rectangle has a non-positive side
            PlacementError: If a rectangle cannot be placed
        """
        rects = list(rects)
        for rect in rects:
            self._check_requested(rect)

        ordered = sorted(rects, key=lambda r: max(r.width, r.height), reverse=True)
        self.logger.debug(f"Placing {len(ordered)} rectangles")

        for rect in ordered:
            if not self.place(rect):
                raise PlacementError(
                    f"can't fit all rectangles ({rect.width}x{rect.height} does not fit "
                    f"within {self.max_width}x{self.max_height})"
                )

    def place(self, rect: Rect) -> bool:
        """
        Place a single rectangle.

        Args:
            rect: Rectangle to place; x and y are written on success

        Returns:
            True if the rectangle was placed
        """
        self._check_requested(rect)
        width = rect.width + self.padding
        height = rect.height + self.padding

        for _ in range(MAX_GROWTH_PASSES + 1):
            node = self._find_node(width, height)

            if node is not None and self._cover(node):
                self._commit(node)
                rect.x = node.x
                rect.y = node.y
                return True

            if not self._grow_for(width, height):
                return False

        self.logger.warning(f"Gave up placing {rect.width}x{rect.height} after {MAX_GROWTH_PASSES} growths")
        return False

    def _check_requested(self, rect: Rect) -> None:
        if rect.is_degenerate:
            raise InvalidConfigurationError(
                f"Rectangle dimensions must be positive (got {rect.width}x{rect.height})"
            )

    def _cover(self, node: Rect) -> bool:
        """Make sure the realized container covers a found node."""
        if self._update_bin_size(node):
            return True
        return (node.right - self.padding + self.border <= self.width and
                node.bottom - self.padding + self.border <= self.height)

    def _commit(self, node: Rect) -> None:
        survivors = []
        fragments = []
        for region in self._free_regions:
            if region.collides(node):
                fragments.extend(self._split(region, node))
            else:
                survivors.append(region)

        self._free_regions = survivors + fragments
        self._prune()

        self._wider_than_tall = self.width > self.height
        self._used_area += node.area
        self.placement_count += 1

    def _grow_for(self, width: int, height: int) -> bool:
        """Try to grow towards the preferred edge, then the other one."""
        right = Rect(width, height, self.width + self.padding - self.border, self.border)
        below = Rect(width, height, self.border, self.height + self.padding - self.border)

        if self._wider_than_tall:
            candidates = (below, right)
        else:
            candidates = (right, below)

        return any(self._update_bin_size(candidate) for candidate in candidates)

    def _find_node(self, width: int, height: int) -> Optional[Rect]:
        best_node = None
        best_score = None

        for region in self._free_regions:
            if region.width < width or region.height < height:
                continue

            if self.heuristic == PackHeuristic.MAX_AREA:
                score = region.area - width * height
            else:
                score = min(region.width - width, region.height - height)

            if best_score is None or score < best_score:
                best_node = Rect(width, height, region.x, region.y)
                best_score = score

        return best_node

    @staticmethod
    def _split(free: Rect, used: Rect) -> List[Rect]:
        """Return the parts of a colliding free region not covered by the used node."""
        pieces = []

        if used.x < free.right and used.right > free.x:
            # Above the used node
            if free.y < used.y < free.bottom:
                pieces.append(Rect(free.width, used.y - free.y, free.x, free.y))
            # Below
            if used.bottom < free.bottom:
                pieces.append(Rect(free.width, free.bottom - used.bottom, free.x, used.bottom))

        if used.y < free.bottom and used.bottom > free.y:
            # Left
            if free.x < used.x < free.right:
                pieces.append(Rect(used.x - free.x, free.height, free.x, free.y))
            # Right
            if used.right < free.right:
                pieces.append(Rect(free.right - used.right, free.height, used.right, free.y))

        return pieces

    def _prune(self) -> None:
        """Drop free regions contained in another one, keeping one of any duplicates."""
        regions = self._free_regions
        kept = []
        for i, region in enumerate(regions):
            redundant = False
            for j, other in enumerate(regions):
                if i == j or not other.contains(region):
                    continue
                if not region.contains(other) or j > i:
                    redundant = True
                    break
            if not redundant:
                kept.append(region)
        self._free_regions = kept

    def _update_bin_size(self, node: Rect) -> bool:
        """
        Grow the container so it covers node.

        Returns:
            True if the container size was recomputed, False if growth is
            disabled, already covers node, or would exceed the maximum
        """
        if not self.growth_enabled:
            return False

        if self._stage.contains(node):
            return False

        new_width = max(self.width, node.right - self.padding + self.border)
        new_height = max(self.height, node.bottom - self.padding + self.border)

        if self.power_of_two:
            new_width = next_power_of_two(new_width)
            new_height = next_power_of_two(new_height)

        if self.square:
            new_width = new_height = max(new_width, new_height)

        if new_width > self.max_width + self.padding or new_height > self.max_height + self.padding:
            self.logger.debug(f"Growth to {new_width}x{new_height} rejected (max {self.max_width}x{self.max_height})")
            return False

        self._expand_free_regions(new_width + self.padding, new_height + self.padding)

        if (new_width, new_height) != (self.width, self.height):
            self.logger.debug(f"Bin grew from {self.width}x{self.height} to {new_width}x{new_height}")

        self._stage.width = new_width
        self._stage.height = new_height
        self.width = new_width
        self.height = new_height
        return True

    def _expand_free_regions(self, width: int, height: int) -> None:
        border = self.border
        old_right = self.width + self.padding - border
        old_bottom = self.height + self.padding - border

        for region in self._free_regions:
            if region.right >= min(old_right, width):
                region.width = width - region.x - border
            if region.bottom >= min(old_bottom, height):
                region.height = height - region.y - border

        self._free_regions.append(Rect(width - self.width - self.padding, height - border * 2, old_right, border))
        self._free_regions.append(Rect(width - border * 2, height - self.height - self.padding, border, old_bottom))

        self._free_regions = [
            region for region in self._free_regions
            if not region.is_degenerate and region.x >= border and region.y >= border
        ]
        self._prune()
