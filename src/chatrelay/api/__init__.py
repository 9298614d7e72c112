"""HTTP surface: the Telegram webhook."""

from chatrelay.api.app import create_app, run_server

__all__ = ["create_app", "run_server"]
