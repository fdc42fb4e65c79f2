"""Picker keybindings manager."""

from __future__ import annotations

from typing import Literal

PickerAction = Literal[
    "accept",
    "dismissTarget",
    "dismissAndRestart",
]

PICKER_ACTIONS: tuple[PickerAction, ...] = (
    "accept",
    "dismissTarget",
    "dismissAndRestart",
)

# Key notation is the host's (``<CR>``, ``<C-d>``); modes are its mode letters.
KeyId = str

PickerKeybindingsConfig = dict[PickerAction, KeyId | list[KeyId]]

DEFAULT_PICKER_KEYBINDINGS: dict[PickerAction, KeyId | list[KeyId]] = {
    "accept": "<CR>",
    "dismissTarget": "<C-d>",
    "dismissAndRestart": "<C-r>",
}

DEFAULT_MODES: tuple[str, ...] = ("i", "n")


class PickerKeybindingsManager:
    """Maps picker actions to the keys that trigger them."""

    def __init__(
        self,
        config: PickerKeybindingsConfig | None = None,
        modes: tuple[str, ...] = DEFAULT_MODES,
    ) -> None:
        self._action_to_keys: dict[PickerAction, list[KeyId]] = {}
        self.modes = modes
        self._build_maps(config or {})

    def _build_maps(self, config: PickerKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        # Start with defaults
        for action, keys in DEFAULT_PICKER_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # Override with user config
        for action, keys in config.items():
            if action not in PICKER_ACTIONS:
                raise ValueError(f"Unknown picker action: {action!r}")
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def get_keys(self, action: PickerAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def bindings(self) -> list[tuple[PickerAction, KeyId]]:
        """Flat ``(action, key)`` pairs, in action order."""
        return [
            (action, key)
            for action in PICKER_ACTIONS
            for key in self.get_keys(action)
        ]
