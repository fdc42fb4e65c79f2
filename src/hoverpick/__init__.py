"""hoverpick: tab picker and hover translator for Neovim."""

# Catalog
from hoverpick.catalog import NO_NAME, Entry, build_catalog, format_entry

# Host adapters
from hoverpick.host import (
    HandleActivator,
    IndexActivator,
    TabHost,
    TargetActivator,
    select_activator,
)

# Keybindings
from hoverpick.keymap import (
    DEFAULT_PICKER_KEYBINDINGS,
    PickerAction,
    PickerKeybindingsManager,
)

# Overlay contract
from hoverpick.overlay import (
    DISMISS_EVENTS,
    DismissGuard,
    OverlayOptions,
    OverlayRenderer,
    OverlayRequest,
    SurfaceHandle,
    show_overlay,
)

# Picker controller
from hoverpick.picker import (
    Outcome,
    PickerController,
    PickerOptions,
    PickerSession,
    PickerWidget,
    SessionState,
    ignorable,
)

# External commands
from hoverpick.runner import (
    DEFAULT_ENV,
    CommandJob,
    CommandRunner,
    JobAlreadyStarted,
)

# Sanitizer
from hoverpick.sanitize import strip_ansi

# Scheduling
from hoverpick.scheduling import LoopScheduler, Scheduler

# Settings
from hoverpick.settings import Settings, load_settings

# Translation
from hoverpick.translate import Translator, build_trans_args, selection_text

__all__ = [
    # Catalog
    "NO_NAME",
    "Entry",
    "build_catalog",
    "format_entry",
    # Host adapters
    "HandleActivator",
    "IndexActivator",
    "TabHost",
    "TargetActivator",
    "select_activator",
    # Keybindings
    "DEFAULT_PICKER_KEYBINDINGS",
    "PickerAction",
    "PickerKeybindingsManager",
    # Overlay
    "DISMISS_EVENTS",
    "DismissGuard",
    "OverlayOptions",
    "OverlayRenderer",
    "OverlayRequest",
    "SurfaceHandle",
    "show_overlay",
    # Picker
    "Outcome",
    "PickerController",
    "PickerOptions",
    "PickerSession",
    "PickerWidget",
    "SessionState",
    "ignorable",
    # Runner
    "DEFAULT_ENV",
    "CommandJob",
    "CommandRunner",
    "JobAlreadyStarted",
    # Sanitizer
    "strip_ansi",
    # Scheduling
    "LoopScheduler",
    "Scheduler",
    # Settings
    "Settings",
    "load_settings",
    # Translation
    "Translator",
    "build_trans_args",
    "selection_text",
]
