"""chatrelay: Telegram webhook that relays chats to remote AI models.

Library API::

    from chatrelay import ChatRelay

    relay = ChatRelay(bot_token="123:ABC")
    relay.run()
"""

from __future__ import annotations

import logging

from chatrelay.api.app import create_app, run_server
from chatrelay.config import Config

__all__ = ["ChatRelay", "Config", "create_app"]

__version__ = "0.1.0"


class ChatRelay:
    """High-level API for running the relay as a library.

    Args:
        bot_token: Telegram bot token from @BotFather. Falls back to
            ``BOT_TOKEN`` in env/.env.
        host: Interface to bind the webhook server to.
        port: Port to bind the webhook server to.
    """

    def __init__(
        self,
        bot_token: str | None = None,
        host: str | None = None,
        port: int | None = None,
    ):
        self.config = Config.from_args(bot_token=bot_token, host=host, port=port)

    def run(self) -> None:
        """Start the webhook server (blocking)."""
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.INFO,
        )
        logging.getLogger("httpx").setLevel(logging.WARNING)

        errors = self.config.validate()
        if errors:
            raise ValueError("; ".join(errors))

        app = create_app(self.config)
        run_server(app, host=self.config.host, port=self.config.port)
