"""Entry point for the chatrelay webhook server."""

import argparse
import logging
import sys

from chatrelay.api.app import create_app, run_server
from chatrelay.config import Config


def main():
    """Load configuration and serve the Telegram webhook."""
    parser = argparse.ArgumentParser(
        description="chatrelay: Telegram webhook relaying chats to AI models",
    )
    parser.add_argument("--bot-token", help="Telegram bot token")
    parser.add_argument("--host", help="Interface to bind (default 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to bind (default 8000)")
    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logger = logging.getLogger(__name__)

    config = Config.from_args(
        bot_token=args.bot_token,
        host=args.host,
        port=args.port,
    )

    errors = config.validate()
    if errors:
        for err in errors:
            logger.error(err)
        sys.exit(1)

    logger.info("Environment: %s", config.app_env)
    logger.info("BOT_TOKEN set: %s", config.has_token)

    app = create_app(config)
    logger.info("Serving webhook on %s:%d%s", config.host, config.port, config.webhook_path)
    run_server(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
