"""pynvim remote plugin: ``:Trans[!] [lang]`` and ``:TabSwitch``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pynvim

from hoverpick.keymap import PICKER_ACTIONS, PickerKeybindingsManager
from hoverpick.logs import setup_logging
from hoverpick.nvim import (
    ACTION_NOTIFICATION,
    CANCEL_NOTIFICATION,
    DISMISS_NOTIFICATION,
    NvimOverlayRenderer,
    NvimScheduler,
    NvimTabHost,
    TelescopePickerWidget,
    buffer_lines,
    visual_selection,
    word_under_cursor,
)
from hoverpick.picker import PickerController, PickerOptions
from hoverpick.runner import CommandRunner
from hoverpick.settings import Settings, load_settings
from hoverpick.translate import Translator, selection_text

logger = logging.getLogger(__name__)


@dataclass
class Components:
    settings: Settings
    renderer: NvimOverlayRenderer
    widget: TelescopePickerWidget
    controller: PickerController
    translator: Translator


def build_components(nvim: pynvim.Nvim) -> Components:
    settings = load_settings(nvim.vars.get("hoverpick") or {})
    scheduler = NvimScheduler(nvim)
    renderer = NvimOverlayRenderer(nvim)
    widget = TelescopePickerWidget(nvim)
    host = NvimTabHost(nvim)
    controller = PickerController(
        host,
        widget,
        scheduler,
        keymap=PickerKeybindingsManager(settings.picker.keybindings),  # type: ignore[arg-type]
    )
    translator = Translator(
        CommandRunner(scheduler, loop=nvim.loop),
        renderer,
        program=settings.translate.program,
        default_lang=settings.translate.default_lang,
        env=settings.translate.env,
        overlay_options=settings.overlay,
    )
    return Components(settings, renderer, widget, controller, translator)


@pynvim.plugin
class HoverpickPlugin:
    def __init__(self, nvim: pynvim.Nvim) -> None:
        self.nvim = nvim
        self._components: Components | None = None

    @property
    def components(self) -> Components:
        if self._components is None:
            setup_logging()
            self._components = build_components(self.nvim)
        return self._components

    # -- user commands -------------------------------------------------------

    @pynvim.command("Trans", nargs="?", bang=True, sync=True)
    def trans_command(self, args: list[str], bang: bool) -> None:
        """Translate the visual selection or the word under the cursor.

        The selection is only used while visual mode is active, so map it
        with ``<cmd>Trans<CR>`` rather than ``:Trans<CR>``.
        """
        c = self.components
        lang = args[0] if args and args[0] else c.settings.translate.default_lang
        brief = c.settings.translate.brief and not bang
        c.translator.translate(self._selected_text(), lang, brief=brief)

    @pynvim.command("TabSwitch", nargs=0, sync=True)
    def tab_switch_command(self) -> None:
        c = self.components
        c.controller.open(PickerOptions(prompt_title=c.settings.picker.prompt_title))

    def _selected_text(self) -> str | None:
        text = None
        bounds = visual_selection(self.nvim)
        if bounds is not None:
            start, end = bounds
            lines = buffer_lines(self.nvim, start[0], end[0])
            text = selection_text(lines, start, end)
        return text or word_under_cursor(self.nvim)

    # -- notifications from Lua ---------------------------------------------

    @pynvim.rpc_export(ACTION_NOTIFICATION, sync=False)
    def on_picker_action(self, *args: Any) -> None:
        session_id, action, index, prompt_bufnr = args
        c = self.components
        c.widget.remember_prompt(session_id, prompt_bufnr)
        session = c.controller.session
        if session is None or session.id != session_id:
            logger.debug("action for stale session %s ignored", session_id)
            return
        if action not in PICKER_ACTIONS:
            logger.warning("unknown picker action %r", action)
            return
        c.controller.dispatch(session, action, session.entry_at(index))

    @pynvim.rpc_export(CANCEL_NOTIFICATION, sync=False)
    def on_picker_cancel(self, session_id: int) -> None:
        session = self.components.controller.session
        if session is not None and session.id == session_id:
            self.components.controller.cancel(session)

    @pynvim.rpc_export(DISMISS_NOTIFICATION, sync=False)
    def on_overlay_dismiss(self, token: int) -> None:
        self.components.renderer.fire(token)
