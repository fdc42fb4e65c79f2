"""Shared fixtures."""

from __future__ import annotations

import pytest

from .fakes import FakeRenderer, FakeTab, FakeTabHost, FakeWidget, QueueScheduler


@pytest.fixture
def three_tabs() -> list[FakeTab]:
    return [
        FakeTab("/work/a.py"),
        FakeTab("/work/src/b.py", modified=True, windows=2),
        FakeTab("/elsewhere/c.txt", windows=3),
    ]


@pytest.fixture
def host(three_tabs: list[FakeTab]) -> FakeTabHost:
    return FakeTabHost(three_tabs)


@pytest.fixture
def widget() -> FakeWidget:
    return FakeWidget()


@pytest.fixture
def scheduler() -> QueueScheduler:
    return QueueScheduler()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()
