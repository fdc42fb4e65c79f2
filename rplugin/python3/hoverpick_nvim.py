"""Remote plugin manifest entry; Neovim discovers the plugin class here."""

from hoverpick.plugin import HoverpickPlugin  # noqa: F401
