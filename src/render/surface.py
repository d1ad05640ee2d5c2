"""Drawing surfaces the chart renderers paint into.

The core never creates or destroys host surfaces; it looks them up by id
through a SurfaceRegistry and draws into whatever it finds. PillowSurface
is the raster implementation used by the bundled host and the tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont


logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


class DrawingSurface(ABC):
    """Abstract 2D raster target with known pixel dimensions."""

    @property
    @abstractmethod
    def width(self) -> int:
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        pass

    @abstractmethod
    def clear(self, color: Optional[Color] = None) -> None:
        """Reset every pixel (to transparent when color is None)."""
        pass

    @abstractmethod
    def stroke_polyline(self, points: Sequence[Tuple[float, float]], color: Color,
                        width: float, alpha: float = 1.0) -> None:
        pass

    @abstractmethod
    def fill_polygon(self, points: Sequence[Tuple[float, float]], color: Color, alpha: float = 1.0) -> None:
        pass

    @abstractmethod
    def fill_circle(self, center: Tuple[float, float], radius: float, color: Color, alpha: float = 1.0) -> None:
        pass

    @abstractmethod
    def draw_text(self, x: float, y: float, text: str, color: Color) -> None:
        """Draw text with its top-left corner at (x, y)."""
        pass

    @abstractmethod
    def text_width(self, text: str) -> float:
        pass


def _alpha_byte(alpha: float) -> int:
    return int(round(max(0.0, min(1.0, alpha)) * 255))


class PillowSurface(DrawingSurface):
    """RGBA raster backed by a Pillow image.

    Every primitive is drawn on its own transparent layer and alpha
    composited, so translucent lines blend with what is underneath instead
    of overwriting it.
    """

    def __init__(self, width: int, height: int, font: Optional[ImageFont.ImageFont] = None):
        """Initialize a transparent surface.

        Args:
            width: Width in pixels
            height: Height in pixels
            font: Pillow font for labels (Pillow's default font if omitted)
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self.font = font or ImageFont.load_default()
        self.image = Image.new('RGBA', (self._width, self._height), (0, 0, 0, 0))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _layer(self):
        layer = Image.new('RGBA', self.image.size, (0, 0, 0, 0))
        return layer, ImageDraw.Draw(layer)

    def _composite(self, layer) -> None:
        self.image = Image.alpha_composite(self.image, layer)

    def clear(self, color: Optional[Color] = None) -> None:
        fill = (0, 0, 0, 0) if color is None else tuple(color) + (255,)
        self.image = Image.new('RGBA', (self._width, self._height), fill)

    def stroke_polyline(self, points, color, width, alpha=1.0):
        if len(points) < 2:
            return
        layer, draw = self._layer()
        draw.line([(float(x), float(y)) for x, y in points], fill=tuple(color) + (_alpha_byte(alpha),),
                  width=max(1, int(round(width))), joint='curve')
        self._composite(layer)

    def fill_polygon(self, points, color, alpha=1.0):
        if len(points) < 3:
            return
        layer, draw = self._layer()
        draw.polygon([(float(x), float(y)) for x, y in points], fill=tuple(color) + (_alpha_byte(alpha),))
        self._composite(layer)

    def fill_circle(self, center, radius, color, alpha=1.0):
        x, y = center
        layer, draw = self._layer()
        draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=tuple(color) + (_alpha_byte(alpha),))
        self._composite(layer)

    def draw_text(self, x, y, text, color):
        layer, draw = self._layer()
        draw.text((x, y), text, fill=tuple(color) + (255,), font=self.font)
        self._composite(layer)

    def text_width(self, text: str) -> float:
        return ImageDraw.Draw(self.image).textlength(text, font=self.font)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA value of one pixel."""
        return self.image.getpixel((int(x), int(y)))

    def save_png(self, path: str) -> None:
        self.image.save(path, format='PNG')


class SurfaceRegistry:
    """Host-owned lookup of drawing surfaces by stable id."""

    def __init__(self):
        self._surfaces: Dict[str, DrawingSurface] = {}

    def register(self, surface_id: str, surface: DrawingSurface) -> None:
        self._surfaces[surface_id] = surface

    def unregister(self, surface_id: str) -> None:
        self._surfaces.pop(surface_id, None)

    def get(self, surface_id: str) -> Optional[DrawingSurface]:
        """Get a surface, or None (logged) when the host has none under that id."""
        surface = self._surfaces.get(surface_id)
        if surface is None:
            logger.debug("Drawing surface %r is not available", surface_id)
        return surface

    def ids(self) -> List[str]:
        return list(self._surfaces.keys())
