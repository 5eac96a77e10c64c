"""
Module: bounds

Purpose:
    Geometry value types for the screen-capture path. A SelectionBounds is
    what the selection overlay reports (logical, unscaled coordinates); a
    CropRect is the same region in physical pixels of one display; a
    DisplayInfo describes one monitor.

Key Functions:
    - SelectionBounds.is_empty: Zero-area / negative-size check
    - SelectionBounds.scaled(factor): Per-axis half-up rounding to pixels
    - SelectionBounds.relative_to(display): Translate into display space
    - nearest_display(displays, x, y): Display containing / closest to a point
    - round_half_up(value): Rounding used for every crop coordinate

Dependencies:
    - dataclasses (std)
    - math (std)
    - PIL.Image (TYPE_CHECKING only)

Used By:
    - capture.overlay.SelectionOverlay
    - capture.orchestrator.CaptureOrchestrator
    - capture.screen
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from PIL import Image


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from negative infinity.

    Python's built-in round() uses banker's rounding (round(0.5) == 0),
    which shifts crop edges by a pixel on exact halves.

    Example:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-2.5)
        -2
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True, slots=True)
class SelectionBounds:
    """
    Rectangle selected by the user, in logical (unscaled) screen coordinates.

    Attributes:
        x: Left edge in global logical coordinates
        y: Top edge in global logical coordinates
        width: Width in logical pixels
        height: Height in logical pixels

    Invariants:
        - A selection is only capturable when width > 0 and height > 0.
          Empty selections are constructible so the overlay can report them;
          the orchestrator treats them as cancellation.

    Example:
        >>> SelectionBounds(100, 50, 300, 200).scaled(2)
        CropRect(x=200, y=100, width=600, height=400)
    """

    x: float
    y: float
    width: float
    height: float

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_empty(self) -> bool:
        """True when the selection has no capturable area."""
        return self.width <= 0 or self.height <= 0

    # ─────────────────────────────────────────────────────────────────────────
    # Transformations
    # ─────────────────────────────────────────────────────────────────────────

    def scaled(self, factor: float) -> CropRect:
        """
        Convert to physical pixels.

        Each field is rounded independently: round(x * s), round(y * s),
        round(width * s), round(height * s). Rounding the right/bottom
        edges instead would give different widths on fractional scales.

        Args:
            factor: Device pixel ratio of the display holding the selection

        Returns:
            CropRect in physical pixels
        """
        return CropRect(
            x=round_half_up(self.x * factor),
            y=round_half_up(self.y * factor),
            width=round_half_up(self.width * factor),
            height=round_half_up(self.height * factor),
        )

    def relative_to(self, display: DisplayInfo) -> SelectionBounds:
        """
        Translate global coordinates into the display's own coordinate space.

        A display at the origin leaves the bounds unchanged.
        """
        return SelectionBounds(
            x=self.x - display.x,
            y=self.y - display.y,
            width=self.width,
            height=self.height,
        )


@dataclass(frozen=True, slots=True)
class CropRect:
    """
    Integer rectangle in physical pixels of one display's framebuffer.

    Invariants:
        - width > 0 and height > 0
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError(f"width must be > 0: {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be > 0: {self.height}")

    def as_box(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple for PIL."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def crop_from(self, image: Image.Image) -> Image.Image:
        """
        Crop this region from an image.

        Raises:
            ValueError: If the rectangle lies outside the image
        """
        left, top, right, bottom = self.as_box()
        if left < 0 or top < 0 or right > image.width or bottom > image.height:
            raise ValueError(
                f"Crop {self.as_box()} outside image of size {image.width}x{image.height}"
            )
        return image.crop((left, top, right, bottom))


@dataclass(frozen=True, slots=True)
class DisplayInfo:
    """
    One physical monitor.

    Attributes:
        name: Platform display name (for logs)
        x, y: Top-left of the display in global logical coordinates
        width, height: Logical size of the display
        scale_factor: Device pixel ratio (physical / logical)
        is_primary: Whether the platform reports this as the primary display
    """

    name: str
    x: int
    y: int
    width: int
    height: int
    scale_factor: float = 1.0
    is_primary: bool = False

    def contains(self, x: float, y: float) -> bool:
        """Check if a global logical point lies on this display."""
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def distance_to(self, x: float, y: float) -> float:
        """Euclidean distance from a point to the nearest edge (0 if inside)."""
        dx = max(self.x - x, 0, x - (self.x + self.width - 1))
        dy = max(self.y - y, 0, y - (self.y + self.height - 1))
        return math.hypot(dx, dy)


def nearest_display(
    displays: Sequence[DisplayInfo], x: float, y: float
) -> Optional[DisplayInfo]:
    """
    Pick the display that contains a point, or the closest one.

    Args:
        displays: Candidate displays
        x, y: Global logical point (usually the selection's top-left)

    Returns:
        The matching display, or None if there are no displays
    """
    if not displays:
        return None
    for display in displays:
        if display.contains(x, y):
            return display
    return min(displays, key=lambda d: d.distance_to(x, y))
