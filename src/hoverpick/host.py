"""Host capability interfaces and target activation adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from hoverpick.catalog import Entry


class TabHost(Protocol):
    """The editor operations the tab picker needs.

    Tab handles are opaque: they are passed back to the host untouched.
    """

    supports_handle_activation: bool

    def list_tabs(self) -> list[Any]: ...

    def current_buffer_name(self, tab: Any) -> str:
        """Absolute name of the buffer in *tab*'s current window."""
        ...

    def relative_name(self, path: str) -> str:
        """*path* rendered relative to the editor's working directory."""
        ...

    def is_modified(self, tab: Any) -> bool: ...

    def window_count(self, tab: Any) -> int: ...

    def cwd(self) -> str | None: ...

    def set_current_tab(self, tab: Any) -> None: ...

    def goto_tab(self, index: int) -> None: ...

    def close_tab(self, index: int) -> None: ...


class TargetActivator(Protocol):
    def activate(self, entry: Entry) -> None: ...


class HandleActivator:
    """Makes the entry's tab current through its handle."""

    def __init__(self, host: TabHost) -> None:
        self._host = host

    def activate(self, entry: Entry) -> None:
        self._host.set_current_tab(entry.identifier)


class IndexActivator:
    """Jumps to the entry's tab by position.

    Only correct if no tab was opened or closed between the catalog snapshot
    and the jump.
    """

    def __init__(self, host: TabHost) -> None:
        self._host = host

    def activate(self, entry: Entry) -> None:
        self._host.goto_tab(entry.index)


def select_activator(host: TabHost) -> TargetActivator:
    if getattr(host, "supports_handle_activation", False):
        return HandleActivator(host)
    return IndexActivator(host)
