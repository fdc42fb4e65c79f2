"""Word/selection translation through translate-shell."""

from __future__ import annotations

import logging
from typing import Sequence

from hoverpick.overlay import OverlayOptions, OverlayRenderer, show_overlay
from hoverpick.runner import CommandJob, CommandRunner

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM = "trans"
DEFAULT_LANG = ":en"

NOTHING_TO_TRANSLATE = "_Nothing to translate._"
NO_TRANSLATION = "_No translation returned._"
TRANSLATION_HEADING = "### Translation"

Position = tuple[int, int]  # 1-based (row, byte column)


def build_trans_args(
    text: str,
    lang: str = DEFAULT_LANG,
    brief: bool = True,
    program: str = DEFAULT_PROGRAM,
) -> list[str]:
    """Argument vector for one translation; *text* stays a single element."""
    args = [program]
    if brief:
        args.append("-brief")
    args.append("--no-ansi")
    args.append(lang or DEFAULT_LANG)
    args.append(text)
    return args


def _byte_slice(line: str, start: int, end: int | None = None) -> str:
    data = line.encode("utf-8")
    if end is not None:
        # An end column points at the first byte of a character; keep it whole.
        while end < len(data) and data[end] & 0xC0 == 0x80:
            end += 1
    return data[start - 1 : end].decode("utf-8", errors="ignore")


def selection_text(
    lines: Sequence[str], start: Position, end: Position
) -> str | None:
    """Text between two 1-based marks, lines joined by one space and trimmed.

    *lines* are the buffer lines from ``start``'s row through ``end``'s row.
    Columns are byte offsets, inclusive on both ends. Reversed marks are
    swapped. Returns ``None`` when a mark is unset (row 0) or *lines* is empty.
    """
    (srow, scol), (erow, ecol) = start, end
    if srow == 0 or erow == 0:
        return None
    if srow > erow or (srow == erow and scol > ecol):
        (srow, scol), (erow, ecol) = (erow, ecol), (srow, scol)
    if not lines:
        return None

    picked = list(lines)
    if len(picked) == 1:
        picked[0] = _byte_slice(picked[0], scol, ecol)
    else:
        picked[0] = _byte_slice(picked[0], scol)
        picked[-1] = _byte_slice(picked[-1], 1, ecol)
    return " ".join(picked).strip()


def format_spawn_failure(program: str = DEFAULT_PROGRAM) -> list[str]:
    return [
        f"**Failed to start `{program}` process.**",
        "",
        "Is translate-shell installed and on $PATH?",
    ]


def format_result(
    code: int,
    stdout_lines: Sequence[str],
    stderr_lines: Sequence[str],
    program: str = DEFAULT_PROGRAM,
) -> list[str]:
    """Overlay lines for a finished translation job."""
    if code != 0:
        return [f"**{program} failed ({code}):**", "", "```", *stderr_lines, "```"]
    if not stdout_lines:
        return [NO_TRANSLATION]
    return [TRANSLATION_HEADING, "", *stdout_lines]


class Translator:
    """Runs the translator for a piece of text and shows the outcome."""

    def __init__(
        self,
        runner: CommandRunner,
        renderer: OverlayRenderer,
        program: str = DEFAULT_PROGRAM,
        default_lang: str = DEFAULT_LANG,
        env: dict[str, str] | None = None,
        overlay_options: OverlayOptions | None = None,
    ) -> None:
        self._runner = runner
        self._renderer = renderer
        self.program = program
        self.default_lang = default_lang
        self._env = dict(env or {})
        self._overlay_options = overlay_options

    def translate(
        self,
        text: str | None,
        lang: str | None = None,
        brief: bool = True,
    ) -> CommandJob | None:
        """Start a translation of *text*; returns the job, or ``None``."""
        if not text or not text.strip():
            self._show([NOTHING_TO_TRANSLATE])
            return None

        job = CommandJob(
            argv=build_trans_args(
                text, lang or self.default_lang, brief=brief, program=self.program
            ),
            env=dict(self._env),
        )
        logger.info("translating %d chars to %s", len(text), job.argv[-2])
        self._runner.start(job, self._on_exit, self._on_spawn_error)
        return job

    def _on_exit(
        self, code: int, stdout_lines: list[str], stderr_lines: list[str]
    ) -> None:
        if code != 0:
            logger.warning("%s exited with %d", self.program, code)
        self._show(format_result(code, stdout_lines, stderr_lines, self.program))

    def _on_spawn_error(self, job: CommandJob, exc: OSError) -> None:
        self._show(format_spawn_failure(job.program))

    def _show(self, lines: list[str]) -> None:
        show_overlay(self._renderer, lines, self._overlay_options)
