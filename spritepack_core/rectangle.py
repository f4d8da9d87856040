"""
Rectangle primitive for SpritePack.
"""

from dataclasses import dataclass


@dataclass
class Rect:
    """Axis-aligned integer rectangle. Position is written back by the packer."""

    width: int
    height: int
    x: int = 0
    y: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def collides(self, other: "Rect") -> bool:
        """Check whether the open interiors of both rectangles intersect."""
        return (other.x < self.right and other.right > self.x and
                other.y < self.bottom and other.bottom > self.y)

    def contains(self, other: "Rect") -> bool:
        """Check whether other lies within this rectangle, edges included."""
        return (other.x >= self.x and other.y >= self.y and
                other.right <= self.right and other.bottom <= self.bottom)
