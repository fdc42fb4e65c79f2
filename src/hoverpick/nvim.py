"""Neovim adapters: tab host, scheduler, floating overlay and telescope picker.

Everything here talks to the editor through pynvim. Callbacks coming back
from Lua arrive as RPC notifications handled in :mod:`hoverpick.plugin`.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Sequence

import pynvim

from hoverpick.catalog import format_entry
from hoverpick.keymap import PickerKeybindingsManager
from hoverpick.overlay import OverlayRequest, fit_width, resolve_size
from hoverpick.picker import PickerSession

logger = logging.getLogger(__name__)

DISMISS_NOTIFICATION = "hoverpick_overlay_dismiss"
ACTION_NOTIFICATION = "hoverpick_picker_action"
CANCEL_NOTIFICATION = "hoverpick_picker_cancel"


# ---------------------------------------------------------------------------
# Host
# ---------------------------------------------------------------------------


class NvimTabHost:
    """:class:`~hoverpick.host.TabHost` over the Neovim API."""

    def __init__(self, nvim: pynvim.Nvim) -> None:
        self._nvim = nvim
        self.supports_handle_activation = bool(
            nvim.funcs.exists("*nvim_set_current_tabpage")
        )

    def list_tabs(self) -> list[Any]:
        return list(self._nvim.api.list_tabpages())

    def current_buffer_name(self, tab: Any) -> str:
        return tab.window.buffer.name

    def relative_name(self, path: str) -> str:
        return self._nvim.funcs.fnamemodify(path, ":.")

    def is_modified(self, tab: Any) -> bool:
        return bool(tab.window.buffer.options["modified"])

    def window_count(self, tab: Any) -> int:
        return len(tab.windows)

    def cwd(self) -> str | None:
        return self._nvim.funcs.getcwd() or None

    def set_current_tab(self, tab: Any) -> None:
        self._nvim.current.tabpage = tab

    def goto_tab(self, index: int) -> None:
        self._nvim.command(f"tabnext {index}")

    def close_tab(self, index: int) -> None:
        self._nvim.command(f"tabclose {index}")


class NvimScheduler:
    """Runs callbacks on the editor's event loop, where API calls are legal."""

    def __init__(self, nvim: pynvim.Nvim) -> None:
        self._nvim = nvim

    def schedule(self, fn: Callable[[], None]) -> None:
        self._nvim.async_call(fn)


# ---------------------------------------------------------------------------
# Overlay
# ---------------------------------------------------------------------------

_OPEN_FLOAT_LUA = """
local lines, filetype, opts = ...
local _, winnr = vim.lsp.util.open_floating_preview(lines, filetype, opts)
return winnr
"""

_DISMISS_AUTOCMD_LUA = """
local chan, token, events, notification = ...
vim.api.nvim_create_autocmd(events, {
  buffer = 0,
  once = true,
  callback = function()
    vim.rpcnotify(chan, notification, token)
  end,
})
"""


class NvimSurface:
    def __init__(self, nvim: pynvim.Nvim, winnr: int) -> None:
        self._nvim = nvim
        self.winnr = winnr

    def is_valid(self) -> bool:
        return bool(self._nvim.api.win_is_valid(self.winnr))

    def close(self) -> None:
        if self.is_valid():
            self._nvim.api.win_close(self.winnr, True)


class NvimOverlayRenderer:
    """Floating markdown preview, the way LSP hover windows are shown.

    Dismissal callbacks wait in ``_pending`` until their autocmd notifies
    back. An entry whose window is already gone is dropped the next time an
    overlay is shown, since its autocmd may never fire.
    """

    def __init__(self, nvim: pynvim.Nvim) -> None:
        self._nvim = nvim
        self._pending: dict[int, tuple[NvimSurface | None, Callable[[], None]]] = {}
        self._tokens = itertools.count(1)
        self._last_surface: NvimSurface | None = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _prune(self) -> None:
        for token, (surface, _) in list(self._pending.items()):
            if surface is None or not surface.is_valid():
                del self._pending[token]

    def show(self, request: OverlayRequest) -> NvimSurface:
        self._prune()
        opts = request.options
        columns = self._nvim.options["columns"]
        lines = self._nvim.options["lines"]
        max_width = resolve_size(opts.max_width, columns)
        float_opts = {
            "width": fit_width(request.content, max_width),
            "border": opts.border,
            "focusable": opts.focusable,
            "focus": opts.focus,
            "max_width": max_width,
            "max_height": resolve_size(opts.max_height, lines),
            "anchor": opts.anchor,
        }
        float_opts = {k: v for k, v in float_opts.items() if v is not None}
        winnr = self._nvim.exec_lua(
            _OPEN_FLOAT_LUA, request.content, opts.filetype, float_opts
        )
        self._last_surface = NvimSurface(self._nvim, winnr)
        return self._last_surface

    def on_events(
        self, events: Sequence[str], callback: Callable[[], None]
    ) -> None:
        token = next(self._tokens)
        self._pending[token] = (self._last_surface, callback)
        self._nvim.exec_lua(
            _DISMISS_AUTOCMD_LUA,
            self._nvim.channel_id,
            token,
            list(events),
            DISMISS_NOTIFICATION,
        )

    def fire(self, token: int) -> None:
        """Deliver a dismissal trigger; unknown or spent tokens are ignored."""
        entry = self._pending.pop(token, None)
        if entry is not None:
            entry[1]()


# ---------------------------------------------------------------------------
# Picker widget (telescope.nvim)
# ---------------------------------------------------------------------------

_PICKER_LUA = """
local chan, session_id, rows, title, bindings, modes, opts, notifications = ...
local ok = pcall(require, 'telescope')
if not ok then
  error('hoverpick: requires nvim-telescope/telescope.nvim')
end

local pickers = require('telescope.pickers')
local finders = require('telescope.finders')
local conf = require('telescope.config').values
local actions = require('telescope.actions')
local action_state = require('telescope.actions.state')

local acted = false

pickers.new(opts, {
  prompt_title = title,
  finder = finders.new_table({
    results = rows,
    entry_maker = function(row)
      return { value = row.index, display = row.display, ordinal = row.ordinal }
    end,
  }),
  sorter = conf.generic_sorter(opts),
  previewer = false,
  attach_mappings = function(prompt_bufnr, map)
    for _, binding in ipairs(bindings) do
      local action, key = binding[1], binding[2]
      map(modes, key, function()
        acted = true
        local entry = action_state.get_selected_entry()
        local index = entry and entry.value or vim.NIL
        vim.rpcnotify(chan, notifications.action, session_id, action, index, prompt_bufnr)
      end)
    end
    actions.close:enhance({
      post = function()
        if not acted then
          vim.rpcnotify(chan, notifications.cancel, session_id)
        end
      end,
    })
    return true
  end,
}):find()
"""

_CLOSE_PICKER_LUA = """
local prompt_bufnr = ...
require('telescope.actions').close(prompt_bufnr)
"""


class TelescopePickerWidget:
    """Shows a session's entries in a telescope picker.

    Keys report back through ``hoverpick_picker_action`` notifications; the
    prompt buffer they carry is remembered so :meth:`close` can find it.
    """

    def __init__(self, nvim: pynvim.Nvim) -> None:
        self._nvim = nvim
        self._prompt_buffers: dict[int, int] = {}

    def open(
        self, session: PickerSession, keymap: PickerKeybindingsManager
    ) -> None:
        rows = [
            {
                "index": entry.index,
                "display": format_entry(entry),
                "ordinal": entry.search_key,
            }
            for entry in session.entries
        ]
        self._nvim.exec_lua(
            _PICKER_LUA,
            self._nvim.channel_id,
            session.id,
            rows,
            session.options.prompt_title,
            [list(binding) for binding in keymap.bindings()],
            list(keymap.modes),
            session.options.widget_options,
            {"action": ACTION_NOTIFICATION, "cancel": CANCEL_NOTIFICATION},
        )

    def remember_prompt(self, session_id: int, prompt_bufnr: int) -> None:
        self._prompt_buffers[session_id] = prompt_bufnr

    def close(self, session: PickerSession) -> None:
        prompt_bufnr = self._prompt_buffers.pop(session.id, None)
        if prompt_bufnr is None:
            return
        self._nvim.exec_lua(_CLOSE_PICKER_LUA, prompt_bufnr)


# ---------------------------------------------------------------------------
# Text under the cursor
# ---------------------------------------------------------------------------

VISUAL_MODES = ("v", "V", "\x16")
_LINE_END = 2147483647


def visual_selection(
    nvim: pynvim.Nvim,
) -> tuple[tuple[int, int], tuple[int, int]] | None:
    """Bounds of the active visual selection, or ``None`` outside visual mode.

    Reads the live ``v`` and ``.`` positions; ``'<`` and ``'>`` only move
    once visual mode ends. Positions are 1-based ``(row, col)`` pairs in
    buffer order. Linewise selections span whole lines.
    """
    mode = nvim.api.get_mode()["mode"][:1]
    if mode not in VISUAL_MODES:
        return None
    _, vrow, vcol, _ = nvim.funcs.getpos("v")
    _, crow, ccol, _ = nvim.funcs.getpos(".")
    start, end = sorted([(vrow, vcol), (crow, ccol)])
    if mode == "V":
        start, end = (start[0], 1), (end[0], _LINE_END)
    return start, end


def buffer_lines(nvim: pynvim.Nvim, first_row: int, last_row: int) -> list[str]:
    if first_row > last_row:
        first_row, last_row = last_row, first_row
    return list(nvim.current.buffer[first_row - 1 : last_row])


def word_under_cursor(nvim: pynvim.Nvim) -> str:
    return nvim.funcs.expand("<cword>")
