"""Overlay rendering contract and dismissal wiring.

The floating surface itself belongs to the host; this module defines what is
asked of it and guarantees that each shown surface is torn down exactly once.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal, Protocol, Sequence, Union

from hoverpick.text import visible_width

logger = logging.getLogger(__name__)

# Events that dismiss a shown overlay, in the host's autocmd vocabulary.
DISMISS_EVENTS: tuple[str, ...] = ("CursorMoved", "BufHidden", "InsertEnter")

OverlayAnchor = Literal["NW", "NE", "SW", "SE"]

# int  ->  exact number of cells
# str  ->  percentage string like "50%"
SizeValue = Union[int, str]


@dataclass
class OverlayOptions:
    border: str = "rounded"
    focusable: bool = True
    focus: bool = True
    max_width: SizeValue = "50%"
    max_height: SizeValue = "40%"
    anchor: OverlayAnchor = "NW"
    filetype: str = "markdown"


@dataclass
class OverlayRequest:
    content: list[str]
    options: OverlayOptions = field(default_factory=OverlayOptions)


class SurfaceHandle(Protocol):
    def close(self) -> None:
        """Tear the surface down. Closing twice must be harmless."""
        ...

    def is_valid(self) -> bool: ...


class OverlayRenderer(Protocol):
    def show(self, request: OverlayRequest) -> SurfaceHandle: ...

    def on_events(
        self, events: Sequence[str], callback: Callable[[], None]
    ) -> None:
        """Invoke *callback* the first time any of *events* fires."""
        ...


def resolve_size(value: SizeValue | None, reference_size: int) -> int | None:
    """Resolve a ``SizeValue`` against *reference_size*.

    * ``None``  -> ``None``
    * ``int``   -> returned as-is
    * ``"50%"`` -> ``math.floor(reference_size * 50 / 100)``
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.endswith("%"):
        try:
            pct = float(value[:-1])
        except ValueError:
            return None
        return math.floor(reference_size * pct / 100)
    return None


def split_lines(content: Iterable[str]) -> list[str]:
    """Flatten *content* so no element carries an embedded newline."""
    lines: list[str] = []
    for chunk in content:
        lines.extend(chunk.split("\n"))
    return lines


def fit_width(lines: Sequence[str], max_width: int | None) -> int:
    """Width in cells needed to show *lines*, capped at *max_width*."""
    widest = max((visible_width(line) for line in lines), default=0)
    if max_width is None:
        return max(widest, 1)
    return max(1, min(widest, max_width))


class DismissGuard:
    """Closes a surface on the first trigger; later triggers do nothing."""

    def __init__(self, handle: SurfaceHandle) -> None:
        self._handle = handle
        self.fired = False

    def __call__(self) -> None:
        if self.fired:
            return
        self.fired = True
        if self._handle.is_valid():
            self._handle.close()


def show_overlay(
    renderer: OverlayRenderer,
    content: Iterable[str],
    options: OverlayOptions | None = None,
) -> SurfaceHandle:
    """Show *content* and register one set of dismissal triggers for it."""
    request = OverlayRequest(split_lines(content), options or OverlayOptions())
    handle = renderer.show(request)
    renderer.on_events(DISMISS_EVENTS, DismissGuard(handle))
    logger.debug("overlay shown (%d lines)", len(request.content))
    return handle
