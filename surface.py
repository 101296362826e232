"""
Drawing surfaces for the track canvas.

A Surface executes the draw commands produced by the Renderer. ImageSurface
rasterizes them with Pillow and can hand the frame out as a numpy array for
OpenCV or save it as an image file.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from constants import COLORS
from renderer import Clear, Circle, DrawCommand, Line, Polygon, Polyline, Text
from tracking.errors import SurfaceNotReady

logger = logging.getLogger(__name__)


# Font cache keyed by (size, bold)
_font_cache: dict = {}
_font_paths: dict = {}

_FONT_CANDIDATES = {
    False: ["DejaVuSansMono.ttf", "DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttf",
            "/System/Library/Fonts/Helvetica.ttc"],
    True: ["DejaVuSansMono-Bold.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf", "Arial.ttf",
           "/System/Library/Fonts/Helvetica.ttc"],
}


def _get_font(size: float = 10, bold: bool = False):
    """Get a cached font instance."""
    int_size = max(1, int(size))
    key = (int_size, bold)

    if key in _font_cache:
        return _font_cache[key]

    if bold not in _font_paths:
        _font_paths[bold] = None
        for font_name in _FONT_CANDIDATES[bold]:
            try:
                ImageFont.truetype(font_name, 12)
                _font_paths[bold] = font_name
                break
            except (OSError, IOError):
                continue

    try:
        if _font_paths[bold]:
            font = ImageFont.truetype(_font_paths[bold], int_size)
        else:
            font = ImageFont.load_default(size=int_size)
    except (OSError, IOError, TypeError):
        # Older Pillow releases have no sized default font
        font = ImageFont.load_default()

    _font_cache[key] = font
    return font


class Surface(ABC):
    """
    Abstract drawing target for render commands.

    Subclasses must implement:
        - size: Property returning (width, height) in pixels
        - resize(width, height): Change the drawing area
        - draw(commands): Execute a full command list
    """

    @property
    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Return (width, height) of the surface."""
        pass

    @abstractmethod
    def resize(self, width: int, height: int) -> None:
        pass

    @abstractmethod
    def draw(self, commands: Iterable[DrawCommand]) -> None:
        pass

    @property
    def ready(self) -> bool:
        width, height = self.size
        return width > 0 and height > 0


class ImageSurface(Surface):
    """Pillow-backed surface.

    Args:
        width: Canvas width in pixels (0 means not ready yet)
        height: Canvas height in pixels (0 means not ready yet)
    """

    def __init__(self, width: int = 0, height: int = 0):
        self._width = width
        self._height = height
        self._image: Optional[Image.Image] = None
        self.frames_drawn = 0

    @property
    def size(self) -> Tuple[int, int]:
        return self._width, self._height

    @property
    def image(self) -> Optional[Image.Image]:
        """Last drawn frame, None until the first draw."""
        return self._image

    def resize(self, width: int, height: int) -> None:
        self._width = max(0, int(width))
        self._height = max(0, int(height))
        self._image = None

    def draw(self, commands: Iterable[DrawCommand]) -> None:
        """Rasterize a command list onto a fresh frame.

        Raises:
            SurfaceNotReady: If the surface has no usable size
        """
        if not self.ready:
            raise SurfaceNotReady(f"Surface size is {self._width}x{self._height}")

        img = Image.new("RGB", (self._width, self._height), COLORS.BACKGROUND)
        draw = ImageDraw.Draw(img)
        for command in commands:
            self._execute(draw, command)

        self._image = img
        self.frames_drawn += 1

    def _execute(self, draw: ImageDraw.ImageDraw, command: DrawCommand) -> None:
        if isinstance(command, Clear):
            draw.rectangle([0, 0, self._width, self._height], fill=command.color)
        elif isinstance(command, Line):
            draw.line([command.start, command.end], fill=command.color, width=command.width)
        elif isinstance(command, Polyline):
            if len(command.points) > 1:
                draw.line(list(command.points), fill=command.color, width=command.width, joint="curve")
        elif isinstance(command, Circle):
            x, y = command.center
            r = command.radius
            draw.ellipse([x - r, y - r, x + r, y + r], fill=command.fill,
                         outline=command.outline, width=command.width)
        elif isinstance(command, Polygon):
            draw.polygon(list(command.points), fill=command.fill)
        elif isinstance(command, Text):
            font = _get_font(command.size, command.bold)
            if isinstance(font, ImageFont.FreeTypeFont):
                draw.text(command.position, command.text, fill=command.color, font=font, anchor="ls")
            else:
                # Bitmap fonts cannot anchor at the baseline
                x, y = command.position
                draw.text((x, y - command.size), command.text, fill=command.color, font=font)
        else:
            raise TypeError(f"Unknown draw command: {type(command).__name__}")

    def to_array(self) -> np.ndarray:
        """Last frame as an RGB uint8 array of shape (height, width, 3)."""
        if self._image is None:
            raise SurfaceNotReady("Nothing has been drawn yet")
        return np.array(self._image)

    def save(self, path: Union[str, Path]) -> str:
        """Save the last frame as an image file."""
        if self._image is None:
            raise SurfaceNotReady("Nothing has been drawn yet")
        path = Path(path)
        if not path.suffix:
            path = path.with_suffix(".png")
        self._image.save(path)
        logger.info(f"Saved track image to {path}")
        return str(path)
