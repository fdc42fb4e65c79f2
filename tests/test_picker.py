"""Tests for hoverpick.picker -- session lifecycle and staged actions."""

from __future__ import annotations

import pytest

from hoverpick.host import HandleActivator, IndexActivator
from hoverpick.picker import (
    PickerController,
    PickerOptions,
    SessionState,
    ignorable,
)

from .fakes import FakeTabHost, FakeWidget, QueueScheduler


@pytest.fixture
def controller(
    host: FakeTabHost, widget: FakeWidget, scheduler: QueueScheduler
) -> PickerController:
    return PickerController(host, widget, scheduler)


class TestIgnorable:
    def test_success(self) -> None:
        calls: list[int] = []
        outcome = ignorable("append", calls.append, 1)
        assert outcome.ok
        assert outcome.error is None
        assert calls == [1]

    def test_failure_is_returned_not_raised(self) -> None:
        def boom() -> None:
            raise RuntimeError("gone")

        outcome = ignorable("boom", boom)
        assert not outcome.ok
        assert isinstance(outcome.error, RuntimeError)


class TestOpen:
    def test_builds_fresh_catalog(
        self, controller: PickerController, widget: FakeWidget
    ) -> None:
        session = controller.open()
        assert session.state is SessionState.OPEN
        assert [e.index for e in session.entries] == [1, 2, 3]
        assert widget.opened == [session]
        assert controller.session is session

    def test_reopening_closes_previous_session(
        self, controller: PickerController, widget: FakeWidget
    ) -> None:
        first = controller.open()
        second = controller.open()
        assert first.state is SessionState.CLOSED
        assert widget.closed == [first]
        assert second.is_open
        assert second.id != first.id

    def test_cancel(self, controller: PickerController) -> None:
        session = controller.open()
        controller.cancel(session)
        assert session.state is SessionState.CLOSED

    def test_activator_chosen_from_host_capability(
        self, three_tabs, widget: FakeWidget, scheduler: QueueScheduler
    ) -> None:
        with_handles = PickerController(FakeTabHost(three_tabs), widget, scheduler)
        without = PickerController(
            FakeTabHost(three_tabs, supports_handle_activation=False), widget, scheduler
        )
        assert isinstance(with_handles._activator, HandleActivator)
        assert isinstance(without._activator, IndexActivator)


class TestAccept:
    def test_activates_target_after_close(
        self,
        controller: PickerController,
        host: FakeTabHost,
        widget: FakeWidget,
        scheduler: QueueScheduler,
    ) -> None:
        session = controller.open()
        entry = session.entries[1]

        assert controller.dispatch(session, "accept", entry)
        assert widget.closed == [session]
        assert session.state is SessionState.CLOSED
        assert session.selected is entry
        # The effect waits for the next tick.
        assert host.calls == []

        scheduler.run_all()
        assert host.calls == [("set_current_tab", host.tabs[1])]

    def test_index_fallback(
        self, three_tabs, widget: FakeWidget, scheduler: QueueScheduler
    ) -> None:
        host = FakeTabHost(three_tabs, supports_handle_activation=False)
        controller = PickerController(host, widget, scheduler)
        session = controller.open()

        controller.dispatch(session, "accept", session.entries[1])
        scheduler.run_all()
        assert host.calls == [("goto_tab", 2)]

    def test_activation_failure_is_swallowed(
        self, controller: PickerController, host: FakeTabHost, scheduler: QueueScheduler
    ) -> None:
        host.fail_activate = True
        session = controller.open()
        controller.dispatch(session, "accept", session.entries[0])
        scheduler.run_all()
        assert session.state is SessionState.CLOSED


class TestDismissTarget:
    def test_closes_tab_by_index_without_activation(
        self,
        controller: PickerController,
        host: FakeTabHost,
        scheduler: QueueScheduler,
    ) -> None:
        session = controller.open()
        controller.dispatch(session, "dismissTarget", session.entries[1])
        scheduler.run_all()

        assert host.calls == [("close_tab", 2)]
        assert session.state is SessionState.CLOSED
        assert len(host.tabs) == 2

    def test_stale_index_failure_is_swallowed(
        self,
        controller: PickerController,
        host: FakeTabHost,
        scheduler: QueueScheduler,
    ) -> None:
        session = controller.open()
        host.tabs.clear()
        controller.dispatch(session, "dismissTarget", session.entries[2])
        scheduler.run_all()
        assert host.calls == [("close_tab", 3)]

    def test_widget_close_failure_is_swallowed(
        self,
        controller: PickerController,
        host: FakeTabHost,
        widget: FakeWidget,
        scheduler: QueueScheduler,
    ) -> None:
        widget.fail_close = True
        session = controller.open()
        controller.dispatch(session, "dismissTarget", session.entries[0])
        scheduler.run_all()
        assert session.state is SessionState.CLOSED
        assert host.calls == [("close_tab", 1)]


class TestDismissAndRestart:
    def test_removal_then_brand_new_session(
        self,
        controller: PickerController,
        host: FakeTabHost,
        widget: FakeWidget,
        scheduler: QueueScheduler,
    ) -> None:
        options = PickerOptions(prompt_title="Tabs", widget_options={"layout": "dropdown"})
        session = controller.open(options)
        controller.dispatch(session, "dismissAndRestart", session.entries[1])

        assert session.state is SessionState.CLOSED
        assert host.calls == []

        scheduler.run_next()  # effect
        assert host.calls == [("close_tab", 2)]
        assert controller.session is session

        scheduler.run_next()  # rebuild
        fresh = controller.session
        assert fresh is not session
        assert fresh is not None and fresh.is_open
        assert fresh.options is options
        assert [e.label for e in fresh.entries] == ["a.py", "/elsewhere/c.txt"]
        assert [e.index for e in fresh.entries] == [1, 2]
        assert widget.opened == [session, fresh]
        assert scheduler.queue == []

    def test_rebuild_happens_even_when_removal_fails(
        self,
        controller: PickerController,
        host: FakeTabHost,
        scheduler: QueueScheduler,
    ) -> None:
        host.fail_close = True
        session = controller.open()
        controller.dispatch(session, "dismissAndRestart", session.entries[0])
        scheduler.run_all()
        assert controller.session is not session
        assert len(controller.session.entries) == 3  # type: ignore[union-attr]


class TestNoOps:
    def test_no_selected_entry(
        self,
        controller: PickerController,
        widget: FakeWidget,
        scheduler: QueueScheduler,
    ) -> None:
        session = controller.open()
        assert not controller.dispatch(session, "accept", None)
        assert session.is_open
        assert widget.closed == []
        assert scheduler.queue == []

    def test_closed_session(
        self,
        controller: PickerController,
        host: FakeTabHost,
        scheduler: QueueScheduler,
    ) -> None:
        session = controller.open()
        controller.dispatch(session, "dismissTarget", session.entries[0])
        scheduler.run_all()

        assert not controller.dispatch(session, "dismissTarget", session.entries[0])
        scheduler.run_all()
        assert host.calls == [("close_tab", 1)]

    def test_superseded_session(
        self, controller: PickerController, scheduler: QueueScheduler
    ) -> None:
        first = controller.open()
        controller.open()
        assert not controller.dispatch(first, "accept", first.entries[0])
        assert scheduler.queue == []

    def test_unknown_action(self, controller: PickerController) -> None:
        session = controller.open()
        with pytest.raises(ValueError):
            controller.dispatch(session, "explode", session.entries[0])  # type: ignore[arg-type]


class TestEntryAt:
    def test_lookup(self, controller: PickerController) -> None:
        session = controller.open()
        assert session.entry_at(2) is session.entries[1]
        assert session.entry_at(9) is None
        assert session.entry_at(None) is None
