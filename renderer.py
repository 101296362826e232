"""
Track canvas renderer.

Turns a PathState and a ViewConfig into an ordered list of draw commands:
grid, axes, origin marker, travelled path, current position with heading
arrow, and the scale readout. The renderer never touches a real drawing
target; a Surface executes the commands (see surface.py), which keeps the
renderer testable by asserting on the emitted list.

Coordinates are local meters mapped to pixels with the Y axis inverted so
north is up:
    canvas_x = margin + x * pixels_per_meter
    canvas_y = canvas_height - margin - y * pixels_per_meter
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from constants import (
    COLORS, Colors,
    ORIGIN_RADIUS, PATH_POINT_RADIUS, CURRENT_POINT_RADIUS, OUTLINE_WIDTH,
    GRID_LINE_WIDTH, AXIS_LINE_WIDTH, PATH_LINE_WIDTH,
    HEADING_ARROW_SHAPE,
    GRID_LABEL_FONT_SIZE, AXIS_LABEL_FONT_SIZE, ORIGIN_LABEL_FONT_SIZE,
    POINT_LABEL_FONT_SIZE, SCALE_FONT_SIZE,
)
from grid_scaler import GridScaler

Point = Tuple[float, float]
Color = Tuple[int, int, int]


# =============================================================================
# Draw Commands
# =============================================================================

@dataclass(frozen=True)
class Clear:
    """Fill the whole surface with a color."""
    color: Color
    layer: str = "background"


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point
    color: Color
    width: int = 1
    layer: str = ""


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Point, ...]
    color: Color
    width: int = 1
    layer: str = ""


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float
    fill: Optional[Color] = None
    outline: Optional[Color] = None
    width: int = 1
    layer: str = ""


@dataclass(frozen=True)
class Polygon:
    points: Tuple[Point, ...]
    fill: Color
    layer: str = ""


@dataclass(frozen=True)
class Text:
    """Text anchored at its left baseline."""
    position: Point
    text: str
    color: Color
    size: int = 10
    bold: bool = False
    layer: str = ""


DrawCommand = Union[Clear, Line, Polyline, Circle, Polygon, Text]


def heading_arrow(tip_base: Point, angle_rad: float,
                  shape: Tuple[Point, ...] = HEADING_ARROW_SHAPE) -> Tuple[Point, ...]:
    """Rotate the arrow shape by angle_rad and translate it to tip_base.

    Args:
        tip_base: Pixel position the arrow is drawn from (the current point)
        angle_rad: Pixel-space bearing from atan2(dy, dx)
        shape: Triangle vertices in the arrow's local frame

    Returns:
        Triangle vertices in canvas pixels
    """
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    bx, by = tip_base
    return tuple(
        (bx + px * cos_a - py * sin_a, by + px * sin_a + py * cos_a)
        for px, py in shape
    )


def _format_meters(value: float) -> str:
    return f"{value:g}"


class Renderer:
    """Renders the tracked path into draw commands.

    Args:
        grid_scaler: GridScaler deciding grid spacing (default candidates if None)
        colors: Color palette
    """

    def __init__(self, grid_scaler: Optional[GridScaler] = None, colors: Colors = COLORS):
        self.grid_scaler = grid_scaler or GridScaler()
        self.colors = colors

    def render(self, state, view) -> List[DrawCommand]:
        """Produce the full command list for one frame.

        Args:
            state: PathState (or anything exposing ``points``)
            view: ViewConfig with canvas size, margin and scale

        Returns:
            Draw commands in painting order
        """
        commands: List[DrawCommand] = [Clear(self.colors.BACKGROUND)]
        commands.extend(self._grid(view))
        commands.extend(self._axes(view))
        commands.extend(self._origin(view))

        points = list(state.points)
        if points:
            commands.extend(self._path(points, view))

        commands.extend(self._scale_readout(view))
        return commands

    def _grid(self, view) -> List[DrawCommand]:
        commands: List[DrawCommand] = []
        spacing = self.grid_scaler.spacing_for_view(view)
        margin = view.margin_px
        width, height = view.canvas_width, view.canvas_height

        # Vertical lines (constant x)
        max_x = self.grid_scaler.view_range(width, view)
        for i in range(int(max_x // spacing) + 1):
            x = i * spacing
            cx, _ = view.to_canvas(x, 0)
            if cx < margin or cx > width - margin:
                continue
            commands.append(Line((cx, margin), (cx, height - margin),
                                 self.colors.GRID_LINE, GRID_LINE_WIDTH, layer="grid"))
            if cx > margin + 15:
                commands.append(Text((cx - 8, height - margin + 12), _format_meters(x),
                                     self.colors.GRID_LABEL, GRID_LABEL_FONT_SIZE, layer="grid"))

        # Horizontal lines (constant y)
        max_y = self.grid_scaler.view_range(height, view)
        for i in range(int(max_y // spacing) + 1):
            y = i * spacing
            _, cy = view.to_canvas(0, y)
            if cy < margin or cy > height - margin:
                continue
            commands.append(Line((margin, cy), (width - margin, cy),
                                 self.colors.GRID_LINE, GRID_LINE_WIDTH, layer="grid"))
            if cy < height - margin - 10:
                commands.append(Text((5, cy + 3), _format_meters(y),
                                     self.colors.GRID_LABEL, GRID_LABEL_FONT_SIZE, layer="grid"))

        return commands

    def _axes(self, view) -> List[DrawCommand]:
        ox, oy = view.to_canvas(0, 0)
        margin = view.margin_px
        width, height = view.canvas_width, view.canvas_height
        return [
            Line((ox, margin), (ox, height - margin), self.colors.AXIS, AXIS_LINE_WIDTH, layer="axis"),
            Line((margin, oy), (width - margin, oy), self.colors.AXIS, AXIS_LINE_WIDTH, layer="axis"),
            Text((5, 20), "Y (N)", self.colors.AXIS, AXIS_LABEL_FONT_SIZE, bold=True, layer="axis"),
            Text((width - 45, height - 8), "X (E)", self.colors.AXIS, AXIS_LABEL_FONT_SIZE,
                 bold=True, layer="axis"),
        ]

    def _origin(self, view) -> List[DrawCommand]:
        ox, oy = view.to_canvas(0, 0)
        return [
            Circle((ox, oy), ORIGIN_RADIUS, fill=self.colors.ORIGIN_FILL,
                   outline=self.colors.WHITE, width=OUTLINE_WIDTH, layer="origin"),
            Text((ox + 12, oy - 5), "(0,0)", self.colors.ORIGIN_FILL, ORIGIN_LABEL_FONT_SIZE,
                 bold=True, layer="origin"),
        ]

    def _path(self, points, view) -> List[DrawCommand]:
        pixels = [view.to_canvas(p.x, p.y) for p in points]
        commands: List[DrawCommand] = [
            Polyline(tuple(pixels), self.colors.PATH, PATH_LINE_WIDTH, layer="path"),
        ]

        for pixel in pixels[:-1]:
            commands.append(Circle(pixel, PATH_POINT_RADIUS, fill=self.colors.PATH_POINT, layer="point"))

        # Current position
        last = points[-1]
        cx, cy = pixels[-1]
        commands.append(Circle((cx, cy), CURRENT_POINT_RADIUS, fill=self.colors.CURRENT,
                               outline=self.colors.WHITE, width=OUTLINE_WIDTH, layer="current"))
        commands.append(Text((cx + 12, cy - 8), f"({last.x:.1f}, {last.y:.1f})",
                             self.colors.CURRENT, POINT_LABEL_FONT_SIZE, bold=True, layer="current"))

        if len(pixels) > 1:
            px, py = pixels[-2]
            angle = math.atan2(cy - py, cx - px)
            commands.append(Polygon(heading_arrow((cx, cy), angle), self.colors.CURRENT, layer="heading"))

        return commands

    def _scale_readout(self, view) -> List[DrawCommand]:
        spacing = self.grid_scaler.spacing_for_view(view)
        view_range = self.grid_scaler.visible_range(view)
        height = view.canvas_height
        return [
            Text((10, height - 25), f"{_format_meters(spacing)} m/div",
                 self.colors.SCALE_TEXT, SCALE_FONT_SIZE, layer="scale"),
            Text((10, height - 10), f"{view_range:.0f} m x {view_range:.0f} m",
                 self.colors.SCALE_TEXT, SCALE_FONT_SIZE, layer="scale"),
        ]
