"""Tab picker session controller.

A :class:`PickerController` owns at most one open :class:`PickerSession`.
Actions run as a list of named stages: ``close`` runs immediately, and each
following stage (``effect``, then ``rebuild``) runs on a later tick of the
scheduler, so the widget is gone before the host is changed.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from hoverpick.catalog import Entry, build_catalog
from hoverpick.host import TabHost, TargetActivator, select_activator
from hoverpick.keymap import PICKER_ACTIONS, PickerAction, PickerKeybindingsManager
from hoverpick.scheduling import Scheduler

logger = logging.getLogger(__name__)

_session_ids = itertools.count(1)


class SessionState(Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class PickerOptions:
    prompt_title: str = "Tabs"
    # Passed through to the widget untouched.
    widget_options: dict[str, Any] = field(default_factory=dict)


@dataclass
class PickerSession:
    entries: list[Entry]
    options: PickerOptions
    selected: Entry | None = None
    state: SessionState = SessionState.OPEN
    id: int = field(default_factory=lambda: next(_session_ids))

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    def entry_at(self, index: int | None) -> Entry | None:
        """Entry with the 1-based *index*, or ``None``."""
        if index is None:
            return None
        for entry in self.entries:
            if entry.index == index:
                return entry
        return None


class PickerWidget(Protocol):
    def open(
        self, session: PickerSession, keymap: PickerKeybindingsManager
    ) -> None: ...

    def close(self, session: PickerSession) -> None: ...


# ---------------------------------------------------------------------------
# Best-effort host effects
# ---------------------------------------------------------------------------


@dataclass
class Outcome:
    """Result of a host effect whose failure is deliberately ignored."""

    ok: bool
    error: Exception | None = None


def ignorable(label: str, fn: Callable[..., Any], *args: Any) -> Outcome:
    """Call *fn*; a failure is logged at debug level and returned, not raised."""
    try:
        fn(*args)
    except Exception as exc:
        logger.debug("ignored %s failure: %s", label, exc)
        return Outcome(ok=False, error=exc)
    return Outcome(ok=True)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

Stage = tuple[str, Callable[[], None]]


class PickerController:
    def __init__(
        self,
        host: TabHost,
        widget: PickerWidget,
        scheduler: Scheduler,
        activator: TargetActivator | None = None,
        keymap: PickerKeybindingsManager | None = None,
        cwd_resolver: Callable[[], str | None] | None = None,
    ) -> None:
        self._host = host
        self._widget = widget
        self._scheduler = scheduler
        self._activator = activator or select_activator(host)
        self._cwd_resolver = cwd_resolver
        self.keymap = keymap or PickerKeybindingsManager()
        self.session: PickerSession | None = None

    # -- session lifecycle -------------------------------------------------

    def open(self, options: PickerOptions | None = None) -> PickerSession:
        """Build a fresh catalog and show it in a new session."""
        current = self.session
        if current is not None and current.is_open:
            self._close(current)

        entries = build_catalog(self._host, self._cwd_resolver)
        session = PickerSession(entries=entries, options=options or PickerOptions())
        self.session = session
        logger.debug("session %d opened with %d entries", session.id, len(entries))
        self._widget.open(session, self.keymap)
        return session

    def cancel(self, session: PickerSession) -> None:
        """The widget went away without an action."""
        if session.state is SessionState.OPEN:
            session.state = SessionState.CLOSED
            logger.debug("session %d cancelled", session.id)

    def _close(self, session: PickerSession) -> None:
        session.state = SessionState.CLOSING
        ignorable("picker close", self._widget.close, session)
        session.state = SessionState.CLOSED

    # -- actions -------------------------------------------------------------

    def dispatch(
        self,
        session: PickerSession,
        action: PickerAction,
        entry: Entry | None,
    ) -> bool:
        """Run *action* on *entry*; returns ``False`` when it was a no-op."""
        if action not in PICKER_ACTIONS:
            raise ValueError(f"Unknown picker action: {action!r}")
        if session is not self.session or not session.is_open:
            logger.debug("action %s on inactive session %d ignored", action, session.id)
            return False
        if entry is None:
            logger.debug("action %s without a selected entry ignored", action)
            return False

        session.selected = entry
        session.state = SessionState.CLOSING
        self._run_stages(self._stages(session, action, entry))
        return True

    def _stages(
        self, session: PickerSession, action: PickerAction, entry: Entry
    ) -> list[Stage]:
        stages: list[Stage] = [("close", lambda: self._close(session))]
        if action == "accept":
            stages.append(
                ("effect", lambda: ignorable("activate", self._activator.activate, entry))
            )
        else:
            stages.append(
                ("effect", lambda: ignorable("close tab", self._host.close_tab, entry.index))
            )
        if action == "dismissAndRestart":
            stages.append(("rebuild", lambda: self.open(session.options)))
        return stages

    def _run_stages(self, stages: list[Stage]) -> None:
        name, fn = stages[0]
        logger.debug("running stage %s", name)
        fn()
        rest = stages[1:]
        if rest:
            self._scheduler.schedule(lambda: self._run_stages(rest))
