"""PNG export of the monthly calendar report.

Rendering is delegated to plotly's static image export (kaleido).  Only
one export runs at a time; a request made while another is in flight is
rejected rather than queued.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import plotly.graph_objects as go

logger = logging.getLogger(__name__)

PIXEL_RATIO = 2
BACKGROUND = "#ffffff"


def report_filename(year: int, month: int) -> str:
    """``Zenith-Report-<year>-<month>.png`` with a 1-indexed month."""
    return f"Zenith-Report-{year}-{month}.png"


def render_png(fig: go.Figure) -> bytes:
    fig.update_layout(paper_bgcolor=BACKGROUND, plot_bgcolor=BACKGROUND)
    return fig.to_image(format="png", scale=PIXEL_RATIO)


@dataclass(frozen=True)
class ExportResult:
    filename: str
    data: bytes
    mime: str = "image/png"


class ReportExporter:
    """Turns a rendered calendar figure into a downloadable PNG."""

    def __init__(self, renderer: Optional[Callable[[go.Figure], bytes]] = None):
        self.renderer = renderer or render_png
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def export(self, fig: go.Figure, year: int, month: int) -> Optional[ExportResult]:
        """Render ``fig``; returns None if another export is running or rendering fails."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Export of %s-%s rejected: another export is in progress", year, month)
            return None
        try:
            data = self.renderer(fig)
        except Exception:
            logger.exception("Export failed for %s-%s", year, month)
            return None
        finally:
            self._lock.release()
        logger.info("Exported %s (%d bytes)", report_filename(year, month), len(data))
        return ExportResult(filename=report_filename(year, month), data=data)
