"""Tests for pollinations_bot.slack_adapter"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pollinations_bot.slack_adapter import WORKING_NOTICE, SlackAdapter


@pytest.fixture
def adapter():
    """Adapter wired to a mock runner."""
    a = SlackAdapter(bot_token="xoxb-test", app_token="xapp-test")
    a.bot_id = "B_SELF"
    a.runner = MagicMock()
    a.runner.config.ignore_bots = True
    a.runner.handle_message = AsyncMock(return_value="Bot response")
    a.runner.handle_imagine = AsyncMock(return_value="🖼️ **a cat**\nhttp://x/img.png")
    a.runner.aclose = AsyncMock()
    return a


class TestSlackAdapterInit:
    @patch.dict("os.environ", {"SLACK_BOT_TOKEN": "xoxb-test", "SLACK_APP_TOKEN": "xapp-test"})
    def test_init_with_env_vars(self):
        adapter = SlackAdapter()
        assert adapter.bot_token == "xoxb-test"
        assert adapter.app_token == "xapp-test"

    def test_init_with_explicit_tokens(self):
        adapter = SlackAdapter(bot_token="xoxb-explicit", app_token="xapp-explicit")
        assert adapter.bot_token == "xoxb-explicit"
        assert adapter.app_token == "xapp-explicit"

    @patch.dict("os.environ", {}, clear=True)
    def test_init_missing_tokens_raises(self):
        with pytest.raises(ValueError, match="Missing SLACK_BOT_TOKEN or SLACK_APP_TOKEN"):
            SlackAdapter()


class TestSlackAdapterMessage:
    def test_message_routes_to_runner(self, adapter):
        """Message events are routed to runner.handle_message and answered in thread."""
        say = AsyncMock()
        event = {"text": "hello", "user": "U123", "channel": "C123", "ts": "111.222"}

        asyncio.run(adapter._handle_message(event, say))

        call = adapter.runner.handle_message.call_args
        assert call.args[0] == "hello"
        assert call.kwargs["log_context"]["context"]["event_type"] == "message"
        say.assert_awaited_once_with("Bot response", thread_ts="111.222")

    def test_reply_stays_in_existing_thread(self, adapter):
        say = AsyncMock()
        event = {"text": "follow up", "user": "U123", "ts": "111.333", "thread_ts": "111.222"}

        asyncio.run(adapter._handle_message(event, say))

        say.assert_awaited_once_with("Bot response", thread_ts="111.222")

    def test_own_messages_ignored(self, adapter):
        adapter.runner.config.ignore_bots = False
        say = AsyncMock()
        event = {"text": "Bot response", "bot_id": "B_SELF", "ts": "1"}

        asyncio.run(adapter._handle_message(event, say))

        adapter.runner.handle_message.assert_not_called()
        say.assert_not_called()

    def test_other_bots_ignored_by_default(self, adapter):
        say = AsyncMock()
        event = {"text": "beep", "bot_id": "B_OTHER", "ts": "1"}

        asyncio.run(adapter._handle_message(event, say))

        adapter.runner.handle_message.assert_not_called()

    def test_other_bots_answered_when_allowed(self, adapter):
        adapter.runner.config.ignore_bots = False
        say = AsyncMock()
        event = {"text": "beep", "bot_id": "B_OTHER", "ts": "1"}

        asyncio.run(adapter._handle_message(event, say))

        say.assert_awaited_once()

    def test_subtype_events_ignored(self, adapter):
        """Edits, joins and similar message subtypes are not prompts."""
        say = AsyncMock()
        event = {"subtype": "message_changed", "ts": "1"}

        asyncio.run(adapter._handle_message(event, say))

        adapter.runner.handle_message.assert_not_called()

    def test_say_failure_does_not_escape(self, adapter):
        say = AsyncMock(side_effect=RuntimeError("channel_not_found"))
        event = {"text": "hello", "user": "U123", "ts": "1"}

        asyncio.run(adapter._handle_message(event, say))

        say.assert_awaited_once()


class TestSlackAdapterImagine:
    def test_ack_precedes_generation_and_respond(self, adapter):
        calls = []
        ack = AsyncMock(side_effect=lambda **kw: calls.append("ack"))
        respond = AsyncMock(side_effect=lambda **kw: calls.append("respond"))
        adapter.runner.handle_imagine.side_effect = lambda *a, **kw: calls.append("generate") or "done"
        command = {"text": "a cat", "user_id": "U123", "channel_id": "C123"}

        asyncio.run(adapter._handle_imagine(ack, command, respond))

        assert calls == ["ack", "generate", "respond"]
        ack.assert_awaited_once_with(text=WORKING_NOTICE)

    def test_respond_replaces_working_notice(self, adapter):
        ack = AsyncMock()
        respond = AsyncMock()
        command = {"text": "  a cat  ", "user_id": "U123", "channel_id": "C123"}

        asyncio.run(adapter._handle_imagine(ack, command, respond))

        assert adapter.runner.handle_imagine.call_args.args[0] == "a cat"
        respond.assert_awaited_once_with(
            text="🖼️ **a cat**\nhttp://x/img.png",
            response_type="in_channel",
            replace_original=True,
        )

    def test_missing_prompt_shows_usage(self, adapter):
        ack = AsyncMock()
        respond = AsyncMock()

        asyncio.run(adapter._handle_imagine(ack, {"text": ""}, respond))

        assert "Usage: /imagine" in ack.call_args.kwargs["text"]
        adapter.runner.handle_imagine.assert_not_called()
        respond.assert_not_called()

    def test_respond_failure_does_not_escape(self, adapter):
        ack = AsyncMock()
        respond = AsyncMock(side_effect=RuntimeError("expired_url"))

        asyncio.run(adapter._handle_imagine(ack, {"text": "a cat"}, respond))

        respond.assert_awaited_once()


class TestSlackAdapterLifecycle:
    def test_sync_commands_is_a_noop(self, adapter, caplog):
        import logging

        with caplog.at_level(logging.INFO):
            asyncio.run(adapter.sync_commands())

        assert "Slack app manifest" in caplog.text

    @patch("pollinations_bot.slack_adapter.AsyncSocketModeHandler")
    @patch("pollinations_bot.slack_adapter.AsyncApp")
    def test_serve_connects_until_shutdown(self, mock_app_class, mock_handler_class, adapter):
        app = mock_app_class.return_value
        app.client.auth_test = AsyncMock(return_value={"bot_id": "B_NEW"})
        handler = mock_handler_class.return_value
        handler.connect_async = AsyncMock(side_effect=lambda: adapter._shutdown_handler())
        handler.close_async = AsyncMock()

        asyncio.run(adapter._serve(register_signals=False))

        mock_app_class.assert_called_once_with(token="xoxb-test")
        mock_handler_class.assert_called_once_with(app, "xapp-test")
        assert adapter.bot_id == "B_NEW"
        handler.close_async.assert_awaited_once()
        adapter.runner.aclose.assert_awaited_once()
