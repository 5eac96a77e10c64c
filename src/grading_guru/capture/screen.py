"""
Display enumeration, full-resolution grabbing and PNG encoding.

Qt reports screen geometry in logical pixels and grabs at physical
resolution, so the crop rectangle is always computed with the scale factor
of the display that holds the selection.
"""
from __future__ import annotations

import base64
import io
import logging
from typing import List, Optional

from PIL import Image
from PIL.ImageQt import fromqimage
from PySide6.QtGui import QGuiApplication, QScreen

from grading_guru.capture.errors import CaptureFailedError, NoScreenSourcesError
from grading_guru.core.models.bounds import CropRect, DisplayInfo, SelectionBounds, nearest_display

logger = logging.getLogger(__name__)

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def _display_info(screen: QScreen, primary: Optional[QScreen]) -> DisplayInfo:
    geometry = screen.geometry()
    return DisplayInfo(
        name=screen.name(),
        x=geometry.x(),
        y=geometry.y(),
        width=geometry.width(),
        height=geometry.height(),
        scale_factor=float(screen.devicePixelRatio()),
        is_primary=screen is primary,
    )


def list_displays() -> List[DisplayInfo]:
    """All connected displays, primary first."""
    primary = QGuiApplication.primaryScreen()
    displays = [_display_info(screen, primary) for screen in QGuiApplication.screens()]
    displays.sort(key=lambda d: not d.is_primary)
    return displays


def image_to_data_url(image: Image.Image) -> str:
    """Encode an image as a base64 PNG data URL."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return PNG_DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def clamp_to_image(rect: CropRect, image: Image.Image) -> CropRect:
    """
    Clip a crop rectangle to the image.

    Rounding can push a selection that touches the screen edge one pixel past
    the framebuffer.

    Raises:
        ValueError: If nothing of the rectangle lies on the image
    """
    left = max(rect.x, 0)
    top = max(rect.y, 0)
    right = min(rect.x + rect.width, image.width)
    bottom = min(rect.y + rect.height, image.height)
    return CropRect(x=left, y=top, width=right - left, height=bottom - top)


def crop_to_data_url(image: Image.Image, rect: CropRect) -> str:
    """Crop a physical-pixel region from a display image and encode it."""
    region = clamp_to_image(rect, image).crop_from(image)
    return image_to_data_url(region)


class QtScreenGrabber:
    """Grabs displays through QScreen."""

    def displays(self) -> List[DisplayInfo]:
        return list_displays()

    def grab_display(self, display: DisplayInfo) -> Image.Image:
        """
        Capture one display at full resolution.

        Raises:
            NoScreenSourcesError: The display is no longer connected
            CaptureFailedError: The platform returned an empty image
        """
        screen = next((s for s in QGuiApplication.screens() if s.name() == display.name), None)
        if screen is None:
            raise NoScreenSourcesError()
        pixmap = screen.grabWindow(0)
        if pixmap.isNull():
            raise CaptureFailedError(message=f"Could not grab display {display.name}")
        logger.debug(
            f"Grabbed {display.name}: {pixmap.width()}x{pixmap.height()} px "
            f"(scale {display.scale_factor})"
        )
        return fromqimage(pixmap.toImage())

    def grab(self, bounds: SelectionBounds) -> str:
        """
        Capture the selected region as a PNG data URL.

        Raises:
            NoScreenSourcesError: No display is available
            CaptureFailedError: Grabbing, cropping or encoding failed
        """
        display = nearest_display(self.displays(), bounds.x, bounds.y)
        if display is None:
            raise NoScreenSourcesError()
        try:
            rect = bounds.relative_to(display).scaled(display.scale_factor)
        except ValueError as e:
            raise CaptureFailedError(e) from e
        logger.info(f"Capturing {rect} from {display.name}")
        image = self.grab_display(display)
        try:
            return crop_to_data_url(image, rect)
        except (ValueError, OSError) as e:
            raise CaptureFailedError(e) from e
