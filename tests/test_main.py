"""Tests for the application entry point and library API."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest


class TestMain:
    @patch("chatrelay.__main__.run_server")
    @patch("chatrelay.__main__.create_app")
    @patch("chatrelay.__main__.Config")
    @patch("sys.argv", ["chatrelay", "--bot-token=fake", "--port=9000"])
    def test_main_runs(self, mock_config_cls, mock_create_app, mock_run_server):
        from chatrelay.__main__ import main

        mock_config = MagicMock()
        mock_config.validate.return_value = []
        mock_config.host = "127.0.0.1"
        mock_config.port = 9000
        mock_config.webhook_path = "/api/bot"
        mock_config_cls.from_args.return_value = mock_config

        mock_app = MagicMock()
        mock_create_app.return_value = mock_app

        main()

        mock_config_cls.from_args.assert_called_once_with(
            bot_token="fake", host=None, port=9000
        )
        mock_create_app.assert_called_once_with(mock_config)
        mock_run_server.assert_called_once_with(mock_app, host="127.0.0.1", port=9000)

    @patch("chatrelay.__main__.run_server")
    @patch("chatrelay.__main__.create_app")
    @patch("chatrelay.__main__.Config")
    @patch("sys.argv", ["chatrelay"])
    def test_main_exits_on_invalid_config(
        self, mock_config_cls, mock_create_app, mock_run_server
    ):
        from chatrelay.__main__ import main

        mock_config = MagicMock()
        mock_config.validate.return_value = ["AI_TIMEOUT must be between 0 and 28"]
        mock_config_cls.from_args.return_value = mock_config

        with pytest.raises(SystemExit) as exc:
            main()

        assert exc.value.code == 1
        mock_create_app.assert_not_called()
        mock_run_server.assert_not_called()


class TestChatRelay:
    @patch("chatrelay.run_server")
    @patch("chatrelay.create_app")
    def test_run(self, mock_create_app, mock_run_server):
        from chatrelay import ChatRelay

        with patch.dict("os.environ", {}, clear=True), patch("chatrelay.config.load_dotenv"):
            relay = ChatRelay(bot_token="tok", host="127.0.0.1", port=9001)
        relay.run()

        assert relay.config.bot_token == "tok"
        mock_create_app.assert_called_once_with(relay.config)
        mock_run_server.assert_called_once_with(
            mock_create_app.return_value, host="127.0.0.1", port=9001
        )

    @patch("chatrelay.run_server")
    def test_run_rejects_invalid_config(self, mock_run_server):
        from chatrelay import ChatRelay

        with patch.dict("os.environ", {"DEFAULT_MODEL": "nope"}, clear=True), patch(
            "chatrelay.config.load_dotenv"
        ):
            relay = ChatRelay()
        with pytest.raises(ValueError, match="DEFAULT_MODEL"):
            relay.run()
        mock_run_server.assert_not_called()
