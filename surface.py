"""
Drawing surfaces for the grid overlay.

A surface is the 2D context the renderer paints into. Two are provided:

    RasterSurface  - Pillow RGBA image, exported as PNG (map tiles, previews)
    SvgSurface     - svgwrite drawing, exported as SVG (print overlays)

Drawing state never leaks between calls: clipping and erasing are only
available as context managers, and both are undone when the block exits,
including on exceptions.
"""

import io
import re
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import svgwrite
from PIL import Image, ImageDraw, ImageFont

Point = Tuple[float, float]

DEFAULT_FONT_SIZE = 16
FALLBACK_FONTS = {
    False: "DejaVuSans.ttf",
    True: "DejaVuSans-Bold.ttf",
}


@dataclass(frozen=True)
class FontSpec:
    """A parsed CSS-style font string such as "bold 16px Verdana"."""
    size: int = DEFAULT_FONT_SIZE
    family: str = "sans-serif"
    bold: bool = False
    italic: bool = False

    @classmethod
    def parse(cls, font: str) -> 'FontSpec':
        """Parse a CSS font shorthand.

        The size is taken from the first token that starts with digits
        ("16px" -> 16). "bold" and "italic" set the flags; every other token
        after the size is part of the family name.
        """
        size = None
        bold = italic = False
        family_tokens = []

        for token in font.split():
            lowered = token.lower()
            if lowered == "bold":
                bold = True
            elif lowered in ("italic", "oblique"):
                italic = True
            elif size is None and re.match(r"\d+", token):
                size = int(re.match(r"\d+", token).group())
            elif size is not None:
                family_tokens.append(token)

        # "Verdana, sans-serif" -> first family only
        family = " ".join(family_tokens).split(",")[0].strip().strip("'\"")
        return cls(
            size=size or DEFAULT_FONT_SIZE,
            family=family or "sans-serif",
            bold=bold,
            italic=italic,
        )

    @property
    def weight(self) -> str:
        return "bold" if self.bold else "normal"

    @property
    def style(self) -> str:
        return "italic" if self.italic else "normal"


@lru_cache(maxsize=32)
def load_font(spec: FontSpec) -> ImageFont.FreeTypeFont:
    """Resolve a FontSpec to a Pillow font.

    Tries the named family, then DejaVu Sans, then Pillow's built-in font.
    """
    for candidate in (spec.family, FALLBACK_FONTS[spec.bold]):
        try:
            return ImageFont.truetype(candidate, spec.size)
        except OSError:
            continue
    return ImageFont.load_default(size=spec.size)


@dataclass(frozen=True)
class Pen:
    """Stroke style for lines."""
    color: str = "#00f"
    width: float = 2


class Surface:
    """Base class for drawing surfaces.

    Coordinates are screen pixels with the origin at the top left.
    Subclasses implement the drawing primitives and the two scopes.
    """

    def __init__(self, width: int, height: int, opacity: float = 1.0):
        self.width = width
        self.height = height
        self.opacity = opacity
        self._erasing = False

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def opacity(self) -> float:
        return self._opacity

    @opacity.setter
    def opacity(self, value: float):
        if not 0 <= value <= 1:
            raise ValueError(f"opacity must be between 0 and 1, got {value}")
        self._opacity = value

    def resize(self, width: int, height: int):
        """Match the surface to a new viewport size. Resizing clears it."""
        self.width = width
        self.height = height
        self.clear()

    def clear(self):
        raise NotImplementedError

    def stroke_polyline(self, points: Sequence[Point], pen: Pen):
        raise NotImplementedError

    def stroke_polygon(self, points: Sequence[Point], pen: Pen):
        """Stroke a closed outline."""
        points = list(points)
        if points and points[0] != points[-1]:
            points.append(points[0])
        self.stroke_polyline(points, pen)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Optional[str] = None):
        """Fill a rectangle, or erase it inside an erasing() scope."""
        raise NotImplementedError

    def fill_text(self, text: str, x: float, y: float, font: FontSpec, color: str):
        """Draw text with its left end of the baseline at (x, y)."""
        raise NotImplementedError

    def text_width(self, text: str, font: FontSpec) -> float:
        return load_font(font).getlength(text)

    def clipped(self, points: Sequence[Point]):
        """Context manager in which drawing only shows inside the polygon.

        Fewer than three points clip everything away.
        """
        raise NotImplementedError

    @contextmanager
    def erasing(self) -> Iterator['Surface']:
        """Scope in which fill_rect() clears pixels instead of painting them."""
        self._erasing = True
        try:
            yield self
        finally:
            self._erasing = False


class RasterSurface(Surface):
    """Transparent RGBA image drawn with Pillow."""

    def __init__(self, width: int, height: int, opacity: float = 1.0):
        super().__init__(width, height, opacity)
        self.clear()

    def clear(self):
        self.image = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self.image)

    def stroke_polyline(self, points: Sequence[Point], pen: Pen):
        if len(points) < 2:
            return
        ink = (0, 0, 0, 0) if self._erasing else pen.color
        self._draw.line(list(points), fill=ink, width=max(1, int(round(pen.width))), joint="curve")

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Optional[str] = None):
        x0, x1 = sorted((x, x + w))
        y0, y1 = sorted((y, y + h))
        ink = (0, 0, 0, 0) if self._erasing else color
        self._draw.rectangle([x0, y0, x1, y1], fill=ink)

    def fill_text(self, text: str, x: float, y: float, font: FontSpec, color: str):
        self._draw.text((x, y), text, font=load_font(font), fill=color, anchor="ls")

    def text_width(self, text: str, font: FontSpec) -> float:
        return self._draw.textlength(text, font=load_font(font))

    @contextmanager
    def clipped(self, points: Sequence[Point]) -> Iterator['RasterSurface']:
        # Draw freely, then keep only the new pixels under the polygon mask
        snapshot = self.image.copy()
        try:
            yield self
        finally:
            mask = Image.new("L", self.image.size, 0)
            if len(points) >= 3:
                ImageDraw.Draw(mask).polygon([tuple(p) for p in points], fill=255)
            self.image = Image.composite(self.image, snapshot, mask)
            self._draw = ImageDraw.Draw(self.image)

    def to_image(self) -> Image.Image:
        """The drawing with the surface opacity applied to its alpha channel."""
        if self.opacity >= 1:
            return self.image.copy()
        pixels = np.array(self.image)
        pixels[..., 3] = (pixels[..., 3] * self.opacity).round().astype(np.uint8)
        return Image.fromarray(pixels)

    def to_png_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.to_image().save(buffer, format="PNG")
        return buffer.getvalue()

    def save(self, path: Union[str, Path]):
        self.to_image().save(str(path), format="PNG")


class SvgSurface(Surface):
    """Vector surface drawn with svgwrite.

    Each clip scope becomes a <clipPath>. An erase masks everything drawn so
    far with a <mask> that blacks out the erased rectangle.
    """

    def __init__(self, width: int, height: int, opacity: float = 1.0):
        super().__init__(width, height, opacity)
        self.clear()

    def clear(self):
        self.dwg = svgwrite.Drawing(
            size=(f"{self.width}px", f"{self.height}px"),
            viewBox=f"0 0 {self.width} {self.height}",
        )
        self._elements: List = []
        self._clip_urls: List[str] = []
        self._next_id = 0

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def _wrap_clips(self, element):
        # Innermost clip scope wraps the element first
        for url in reversed(self._clip_urls):
            group = self.dwg.g(clip_path=url)
            group.add(element)
            element = group
        return element

    def _add(self, element):
        self._elements.append(self._wrap_clips(element))

    def stroke_polyline(self, points: Sequence[Point], pen: Pen):
        if len(points) < 2:
            return
        self._add(self.dwg.polyline(
            points=[(round(x, 2), round(y, 2)) for x, y in points],
            stroke=pen.color,
            stroke_width=pen.width,
            stroke_linejoin="round",
            fill="none",
        ))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Optional[str] = None):
        x0, x1 = sorted((x, x + w))
        y0, y1 = sorted((y, y + h))
        if not self._erasing:
            self._add(self.dwg.rect((x0, y0), (x1 - x0, y1 - y0), fill=color))
            return

        mask_id = self._new_id("erase")
        mask = self.dwg.defs.add(self.dwg.mask(
            start=(0, 0), size=(self.width, self.height),
            id=mask_id, maskUnits="userSpaceOnUse",
        ))
        mask.add(self.dwg.rect((0, 0), (self.width, self.height), fill="white"))
        mask.add(self._wrap_clips(self.dwg.rect((x0, y0), (x1 - x0, y1 - y0), fill="black")))

        masked = self.dwg.g(mask=f"url(#{mask_id})")
        for element in self._elements:
            masked.add(element)
        self._elements = [masked]

    def fill_text(self, text: str, x: float, y: float, font: FontSpec, color: str):
        self._add(self.dwg.text(
            text,
            insert=(round(x, 2), round(y, 2)),
            fill=color,
            font_size=f"{font.size}px",
            font_family=font.family,
            font_weight=font.weight,
            font_style=font.style,
        ))

    @contextmanager
    def clipped(self, points: Sequence[Point]) -> Iterator['SvgSurface']:
        clip_id = self._new_id("clip")
        clip_path = self.dwg.defs.add(self.dwg.clipPath(id=clip_id))
        clip_path.add(self.dwg.polygon([(round(x, 2), round(y, 2)) for x, y in points]))
        self._clip_urls.append(f"url(#{clip_id})")
        try:
            yield self
        finally:
            self._clip_urls.pop()

    def _assemble(self) -> svgwrite.Drawing:
        root = self.dwg.g(id="metric-grid", opacity=self.opacity)
        for element in self._elements:
            root.add(element)
        self.dwg.elements = [self.dwg.defs, root]
        return self.dwg

    def tostring(self) -> str:
        return self._assemble().tostring()

    def save(self, path: Union[str, Path]):
        self._assemble().saveas(str(path))
