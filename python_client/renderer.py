"""
Scrolling waveform renderer for the ECG Monitor.

The plot is drawn in logical pixel coordinates with the origin at the top
left, so the figure axes span the whole surface and the y axis is inverted.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from matplotlib.collections import LineCollection
from matplotlib.figure import Figure

from config import (ALARM_COLOR, BACKGROUND_COLOR, BASE_DPI, DISPLAY_WINDOW_MS,
                    FRAME_INTERVAL_MS, FULL_SCALE, GRID_COLOR, GRID_LINE_WIDTH,
                    GRID_SPACING_PX, TRACE_COLOR, TRACE_LINE_WIDTH)
from data_models import Sample

logger = logging.getLogger(__name__)


def grid_positions(extent: float, spacing: float = GRID_SPACING_PX) -> List[float]:
    """Grid line offsets from 0 up to (excluding) extent."""
    positions = []
    offset = 0.0
    while offset < extent:
        positions.append(offset)
        offset += spacing
    return positions


def trace_coordinates(samples: Sequence[Sample], width: float, height: float,
                      window_ms: int = DISPLAY_WINDOW_MS) -> Tuple[List[float], List[float]]:
    """
    Map samples to surface coordinates.

    The window is anchored to the newest sample; older samples fall at
    negative x and are still returned.

    Returns:
        Tuple of (xs, ys), both empty when fewer than two samples exist
    """
    if len(samples) < 2:
        return [], []
    start = samples[-1].time - window_ms
    xs = [(s.time - start) / window_ms * width for s in samples]
    ys = [height * (1 - s.value / FULL_SCALE) for s in samples]
    return xs, ys


class BackingSurface:
    """Pixel surface behind the plot, resized only when its pixel size changes."""

    def __init__(self, figure: Figure):
        self.figure = figure
        self.pixel_size: Optional[Tuple[int, int]] = None
        self.logical_size: Tuple[float, float] = (0.0, 0.0)
        self.reallocations = 0

    def ensure_size(self, width: float, height: float, pixel_ratio: float) -> bool:
        """Match the surface to a logical size; returns True if it was resized."""
        pixels = (max(1, round(width * pixel_ratio)),
                  max(1, round(height * pixel_ratio)))
        if pixels == self.pixel_size:
            return False
        dpi = BASE_DPI * pixel_ratio
        self.figure.set_dpi(dpi)
        self.figure.set_size_inches(pixels[0] / dpi, pixels[1] / dpi, forward=False)
        self.pixel_size = pixels
        self.logical_size = (width, height)
        self.reallocations += 1
        logger.debug("Surface resized to %dx%d px", *pixels)
        return True

    def release(self):
        self.pixel_size = None
        self.logical_size = (0.0, 0.0)


class WaveformRenderer:
    """Frame loop drawing the buffer snapshot as a scrolling trace."""

    def __init__(self, figure: Figure, scheduler,
                 snapshot_provider: Callable[[], List[Sample]],
                 alarm_provider: Callable[[], bool],
                 size_provider: Callable[[], Tuple[float, float, float]],
                 draw: Optional[Callable[[], None]] = None):
        """
        Initialize the renderer.

        Args:
            figure: Matplotlib figure used as the drawing surface
            scheduler: Frame timer source (``call_later``/``cancel``)
            snapshot_provider: Returns a copy of the sample history
            alarm_provider: Returns True while the lead-off alarm is active
            size_provider: Returns (logical width, logical height, pixel ratio)
            draw: Pushes the figure to screen; defaults to ``canvas.draw_idle``
        """
        self.figure = figure
        self.scheduler = scheduler
        self.snapshot_provider = snapshot_provider
        self.alarm_provider = alarm_provider
        self.size_provider = size_provider
        self.draw = draw or (lambda: figure.canvas.draw_idle())
        self.surface = BackingSurface(figure)
        self.frames = 0
        self._frame_timer = None

        figure.set_facecolor(BACKGROUND_COLOR)
        self.ax = figure.add_axes([0, 0, 1, 1])
        self.ax.set_axis_off()
        self.ax.set_facecolor(BACKGROUND_COLOR)
        self.grid = LineCollection([], colors=GRID_COLOR, linewidths=GRID_LINE_WIDTH)
        self.ax.add_collection(self.grid)
        self.trace, = self.ax.plot([], [], color=TRACE_COLOR, lw=TRACE_LINE_WIDTH)
        self.overlay = self.ax.text(0.5, 0.5, "", transform=self.ax.transAxes,
                                    ha="center", va="center", color="#9ca3af",
                                    fontsize=12, visible=False)

    @property
    def running(self) -> bool:
        return self._frame_timer is not None

    def start(self):
        """Draw a frame now and keep drawing until stopped."""
        if self.running:
            return
        self.overlay.set_visible(False)
        self._frame()

    def stop(self):
        """Cancel the next frame; safe to call when not running."""
        if self._frame_timer is not None:
            self.scheduler.cancel(self._frame_timer)
            self._frame_timer = None

    def _frame(self):
        self.render_frame()
        self._frame_timer = self.scheduler.call_later(FRAME_INTERVAL_MS, self._frame)

    def render_frame(self):
        width, height, pixel_ratio = self.size_provider()
        if self.surface.ensure_size(width, height, pixel_ratio):
            self._layout(width, height)

        xs, ys = trace_coordinates(self.snapshot_provider(), width, height)
        self.trace.set_data(xs, ys)
        self.trace.set_color(ALARM_COLOR if self.alarm_provider() else TRACE_COLOR)
        self.frames += 1
        self.draw()

    def _layout(self, width: float, height: float):
        """Rebuild limits and the reference grid for a new surface size."""
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        segments = [[(x, 0), (x, height)] for x in grid_positions(width)]
        segments += [[(0, y), (width, y)] for y in grid_positions(height)]
        self.grid.set_segments(segments)

    def show_idle(self, message: str):
        """Replace the trace with a centred message while not monitoring."""
        self.stop()
        self.trace.set_data([], [])
        self.overlay.set_text(message)
        self.overlay.set_visible(True)
        self.draw()

    def release(self):
        self.stop()
        self.surface.release()
