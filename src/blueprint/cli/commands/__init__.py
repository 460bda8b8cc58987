"""CLI command handlers."""

from .converse import cmd_chat, cmd_input, cmd_say
from .export import cmd_export
from .import_cmd import cmd_import
from .journey import cmd_advance, cmd_edit, cmd_reset, cmd_skip
from .new import cmd_list, cmd_new
from .status import cmd_status

__all__ = [
    "cmd_advance",
    "cmd_chat",
    "cmd_edit",
    "cmd_export",
    "cmd_import",
    "cmd_input",
    "cmd_list",
    "cmd_new",
    "cmd_reset",
    "cmd_say",
    "cmd_skip",
    "cmd_status",
]
