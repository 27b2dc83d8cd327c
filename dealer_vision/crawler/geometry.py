"""
Immutable value types passed between capture stages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ListingGeometry:
    """Vertical extent of one listing, in document (page) coordinates."""

    top: float
    height: float
    width: float

    def __post_init__(self):
        if self.top < 0:
            raise ValueError(f"top must be >= 0, got {self.top}")
        if self.height <= 0:
            raise ValueError(f"height must be > 0, got {self.height}")

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class SectionBounds:
    """Padded capture rectangle spanning one batch of listings."""

    start_y: float
    end_y: float

    @property
    def height(self) -> float:
        return self.end_y - self.start_y

    def contains(self, listing: ListingGeometry) -> bool:
        return self.start_y <= listing.top and listing.bottom <= self.end_y

    def to_dict(self) -> Dict[str, float]:
        return {"startY": self.start_y, "endY": self.end_y, "height": self.height}


@dataclass(frozen=True)
class SectionCapture:
    """
    One clipped screenshot covering listings [start_index, end_index).

    screenshot holds the base64-encoded JPEG.
    """

    screenshot: str = field(repr=False)
    item_count: int
    start_index: int
    end_index: int
    dimensions: SectionBounds

    def __post_init__(self):
        if not 0 <= self.start_index < self.end_index:
            raise ValueError(
                f"invalid section range [{self.start_index}, {self.end_index})"
            )
        if self.item_count != self.end_index - self.start_index:
            raise ValueError(
                f"item_count {self.item_count} does not match range "
                f"[{self.start_index}, {self.end_index})"
            )

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly description without the image payload."""
        return {
            "start_index": self.start_index,
            "end_index": self.end_index,
            "item_count": self.item_count,
            "dimensions": self.dimensions.to_dict(),
        }
