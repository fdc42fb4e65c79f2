"""Tab catalog: immutable, display-ready snapshots of the editor's tabs."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

from hoverpick.host import TabHost
from hoverpick.text import pad_to_width

logger = logging.getLogger(__name__)

NO_NAME = "[No Name]"
MODIFIED_MARK = "[+]"

# Column widths of a rendered row: index | label | modified | window count
INDEX_WIDTH = 3
FLAG_WIDTH = 6
COUNT_WIDTH = 6
SEPARATOR = " "


@dataclass(frozen=True)
class Entry:
    index: int
    identifier: Any
    label: str
    path: str
    dirty: bool
    window_count: int

    @property
    def search_key(self) -> str:
        return f"{self.index} {self.label}"


def _relative_label(host: TabHost, path: str, cwd: str | None) -> str:
    if cwd is None:
        return path
    label = host.relative_name(path)
    prefix = cwd.rstrip(os.sep) + os.sep
    if label.startswith(prefix):
        label = label[len(prefix):]
    return label


def build_catalog(
    host: TabHost,
    cwd_resolver: Callable[[], str | None] | None = None,
) -> list[Entry]:
    """Snapshot every tab of *host* in the host's own order.

    *cwd_resolver* defaults to ``host.cwd``; without one, or when it returns
    ``None``, labels are full paths. The host is only queried, never changed.
    """
    if cwd_resolver is None:
        cwd_resolver = getattr(host, "cwd", None)
    cwd = cwd_resolver() if cwd_resolver is not None else None

    entries: list[Entry] = []
    for index, tab in enumerate(host.list_tabs(), start=1):
        path = host.current_buffer_name(tab)
        label = _relative_label(host, path, cwd) if path else NO_NAME
        entries.append(
            Entry(
                index=index,
                identifier=tab,
                label=label,
                path=path or NO_NAME,
                dirty=host.is_modified(tab),
                window_count=host.window_count(tab),
            )
        )

    logger.debug("catalog built with %d entries", len(entries))
    return entries


def format_entry(entry: Entry) -> str:
    """Render *entry* as one picker row."""
    flag = MODIFIED_MARK if entry.dirty else ""
    count = f"({entry.window_count}w)"
    return SEPARATOR.join(
        [
            pad_to_width(str(entry.index), INDEX_WIDTH),
            entry.label,
            pad_to_width(flag, FLAG_WIDTH),
            pad_to_width(count, COUNT_WIDTH),
        ]
    )
