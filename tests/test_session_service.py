"""Tests for the UI session service and the event pump."""
import logging

import pytest

from telechat.core.managers.channels import EventChannel
from telechat.core.schemas.events import (
    ChatsLoaded,
    CodeSent,
    Configured,
    Error,
    LoggedIn,
    LoggedOut,
    MessagesLoaded,
    PasswordRequired,
)
from telechat.core.schemas.intents import BackToChats, Configure, SelectChat, SendMessage
from telechat.core.schemas.records import ChatSummary, MessageRecord
from telechat.ui.services.event_pump import EventPump
from telechat.ui.services.session import BUSY_STATUS, SessionService
from telechat.ui.state.models import GuiStage


class RecordingChannel:
    """Sustituto del IntentChannel que guarda lo enviado."""

    def __init__(self, accept=True):
        self.sent = []
        self.accept = accept

    def try_send(self, intent):
        if self.accept:
            self.sent.append(intent)
        return self.accept


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def session(channel):
    return SessionService(channel)


def _feed(session, *evts):
    ch = EventChannel(capacity=50)
    for e in evts:
        ch._q.put_nowait(e)
    pump = EventPump()
    session.register_event_handlers(pump)
    return pump.pump(ch)


class TestSessionActions:
    """Tests for user actions turned into intents."""

    def test_configure_parses_api_id(self, session, channel):
        assert session.configure(" 12345 ", " abcde ") is True
        assert channel.sent == [Configure(api_id=12345, api_hash="abcde")]

    def test_configure_rejects_non_numeric_id(self, session, channel):
        assert session.configure("abc", "hash") is False
        assert session.state.status == "Invalid API ID (must be a number)"
        assert channel.sent == []

    def test_select_and_send(self, session, channel):
        chat = ChatSummary(name="Ada", id="7")
        session.select_chat(chat)
        session.send_text("hola")

        assert channel.sent == [SelectChat("7"), SendMessage(chat_id="7", text="hola")]
        assert session.state.selected_chat == chat

    def test_blank_text_is_not_sent(self, session, channel):
        session.select_chat(ChatSummary(name="Ada", id="7"))
        assert session.send_text("   ") is False
        assert channel.sent == [SelectChat("7")]

    def test_back_to_chats_clears_view(self, session, channel):
        session.select_chat(ChatSummary(name="Ada", id="7"))
        session.state.messages = [MessageRecord(id=1, text="x")]

        session.back_to_chats()

        assert session.state.selected_chat is None
        assert session.state.messages == []
        assert channel.sent[-1] == BackToChats()

    def test_refused_intent_resets_status(self):
        """Test that a refused intent does not leave a pending status on screen."""
        session = SessionService(RecordingChannel(accept=False))

        assert session.request_code("+1555") is False
        assert session.state.status == BUSY_STATUS
        assert session.submit_code("12345") is False
        assert session.state.status == BUSY_STATUS


class TestSessionEvents:
    """Tests for coordinator events applied to the UI state."""

    def test_login_progression(self, session):
        _feed(session, Configured())
        assert session.state.stage == GuiStage.LOGIN_PHONE
        _feed(session, CodeSent())
        assert session.state.stage == GuiStage.LOGIN_CODE
        _feed(session, PasswordRequired())
        assert session.state.stage == GuiStage.LOGIN_PASSWORD
        assert session.state.status == "2FA Password Required."
        _feed(session, LoggedIn())
        assert session.state.stage == GuiStage.LOGGED_IN

    def test_lists_replace_state(self, session):
        chats = (ChatSummary("A", "1"), ChatSummary("B", "2"))
        msgs = (MessageRecord(id=1, text="hi", sender="A", date="2024-01-01 00:00:00 UTC"),)

        assert _feed(session, ChatsLoaded(chats), MessagesLoaded(msgs)) == 2

        assert session.state.chats == list(chats)
        assert session.state.messages == list(msgs)
        assert session.state.status == "Messages loaded."

    def test_error_only_updates_status(self, session):
        _feed(session, LoggedIn())
        _feed(session, Error("chat not found"))

        assert session.state.status == "Error: chat not found"
        assert session.state.stage == GuiStage.LOGGED_IN

    def test_logout_resets_view(self, session):
        session.state.selected_chat = ChatSummary("A", "1")
        _feed(session, LoggedIn(), ChatsLoaded((ChatSummary("A", "1"),)), LoggedOut())

        assert session.state.stage == GuiStage.LOGIN_PHONE
        assert session.state.chats == []
        assert session.state.selected_chat is None


class TestEventPump:
    """Tests for EventPump dispatch."""

    def test_respects_max_events(self):
        ch = EventChannel(capacity=10)
        for _ in range(5):
            ch._q.put_nowait(Configured())
        seen = []
        pump = EventPump()
        pump.subscribe(Configured, seen.append)

        assert pump.pump(ch, max_events=3) == 3
        assert len(seen) == 3
        assert ch.qsize() == 2

    def test_fallback_for_unsubscribed(self):
        ch = EventChannel(capacity=10)
        ch._q.put_nowait(LoggedOut())
        other = []
        pump = EventPump()
        pump.fallback(other.append)

        pump.pump(ch)

        assert other == [LoggedOut()]

    def test_failing_handler_does_not_stop_others(self, caplog):
        ch = EventChannel(capacity=10)
        ch._q.put_nowait(Error("x"))
        seen = []

        def broken(_evt):
            raise RuntimeError("boom")

        pump = EventPump()
        pump.subscribe(Error, broken)
        pump.subscribe(Error, seen.append)

        with caplog.at_level(logging.ERROR):
            assert pump.pump(ch) == 1
        assert seen == [Error("x")]
        assert "Handler error" in caplog.text
