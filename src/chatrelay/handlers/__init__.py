"""Handler modules for the relay.

Re-exports all public names so that handlers can be used via
``from chatrelay.handlers import cmd_start`` etc.
"""

from chatrelay.handlers._common import ChatContext
from chatrelay.handlers.chat import handle_message
from chatrelay.handlers.commands import (
    cmd_help,
    cmd_model,
    cmd_reset,
    cmd_start,
    cmd_system,
    cmd_unknown,
)

__all__ = [
    # _common
    "ChatContext",
    # commands
    "cmd_start",
    "cmd_help",
    "cmd_model",
    "cmd_system",
    "cmd_reset",
    "cmd_unknown",
    # chat
    "handle_message",
]
