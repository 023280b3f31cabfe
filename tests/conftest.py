"""Pytest configuration and shared fakes."""
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Dict, List, Optional

import pytest

from telechat.coordinator.session_coordinator import SessionCoordinator
from telechat.core.managers.channels import EventChannel, IntentChannel
from telechat.core.schemas.intents import Configure
from telechat.core.schemas.results import Failure, Ok, PasswordNeeded
from telechat.remote.base import (
    LoginToken,
    PasswordToken,
    RemoteMessage,
    RemotePeer,
    RemoteSequence,
    RemoteService,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_peers(n: int, start: int = 1) -> List[RemotePeer]:
    return [RemotePeer(id=i, name=f"Chat {i}", handle=object()) for i in range(start, start + n)]


def make_messages(n: int, start_id: int = 1) -> List[RemoteMessage]:
    """Mensajes del más nuevo al más viejo, como los entrega el servidor."""
    msgs = [
        RemoteMessage(
            id=start_id + i,
            text=f"message {start_id + i}",
            date=BASE_TIME + timedelta(minutes=i),
            sender_name=None if i % 3 == 0 else f"User {i}",
        )
        for i in range(n)
    ]
    return list(reversed(msgs))


class FakeRemoteService(RemoteService):
    """
    Adaptador en memoria con resultados configurables.
    `outcome` ("ok" | "fail" | "password") gobierna las operaciones de login.
    """

    def __init__(self, *, authorized: bool = False, dialogs: Optional[List[RemotePeer]] = None,
                 messages: Optional[Dict[str, List[RemoteMessage]]] = None):
        self.authorized = authorized
        self.outcome = "ok"
        self.connect_result = Ok()
        self.sign_out_result = Ok()
        self.send_result = Ok()
        self.dialogs = dialogs if dialogs is not None else make_peers(3)
        self.messages = messages if messages is not None else {}
        self.dialog_error_after: Optional[int] = None
        self.message_error_after: Optional[int] = None
        self.calls: List[tuple] = []
        self.sent: List[tuple] = []
        self.connected = False
        self.consumed_hashes: set = set()
        self.reused_tokens: List[LoginToken] = []
        self._token_seq = 0

    def _failure(self, op: str):
        return Failure(f"{op} failed")

    async def connect(self):
        self.calls.append(("connect",))
        self.connected = isinstance(self.connect_result, Ok)
        return self.connect_result

    async def disconnect(self):
        self.calls.append(("disconnect",))
        self.connected = False

    async def is_authorized(self):
        self.calls.append(("is_authorized",))
        return self.authorized

    async def request_login_code(self, phone):
        self.calls.append(("request_login_code", phone))
        if self.outcome == "fail":
            return self._failure("request_login_code")
        self._token_seq += 1
        return Ok(LoginToken(phone=phone, phone_code_hash=f"hash-{self._token_seq}"))

    async def sign_in(self, token, code):
        self.calls.append(("sign_in", token, code))
        if token.phone_code_hash in self.consumed_hashes:
            self.reused_tokens.append(token)
        if self.outcome == "password":
            self.consumed_hashes.add(token.phone_code_hash)
            return PasswordNeeded(PasswordToken(phone=token.phone))
        if self.outcome == "fail":
            return Failure("PHONE_CODE_INVALID")
        return Ok()

    async def check_password(self, token, password):
        self.calls.append(("check_password", token, password))
        if self.outcome == "fail":
            return Failure("PASSWORD_HASH_INVALID")
        return Ok()

    async def sign_out(self):
        self.calls.append(("sign_out",))
        return self.sign_out_result

    def iter_dialogs(self):
        async def gen() -> AsyncIterator[RemotePeer]:
            self.calls.append(("iter_dialogs",))
            for i, peer in enumerate(self.dialogs):
                if self.dialog_error_after is not None and i >= self.dialog_error_after:
                    raise ConnectionError("connection lost")
                yield peer
        return RemoteSequence(gen)

    def iter_messages(self, peer):
        async def gen() -> AsyncIterator[RemoteMessage]:
            self.calls.append(("iter_messages", peer.chat_id))
            for i, msg in enumerate(self.messages.get(peer.chat_id, [])):
                if self.message_error_after is not None and i >= self.message_error_after:
                    raise ConnectionError("connection lost")
                yield msg
        return RemoteSequence(gen)

    async def send_message(self, peer, text):
        self.calls.append(("send_message", peer.chat_id, text))
        if isinstance(self.send_result, Ok):
            self.sent.append((peer.chat_id, text))
        return self.send_result


def drain(events: EventChannel) -> list:
    out = []
    while True:
        evt = events.try_recv()
        if evt is None:
            return out
        out.append(evt)


@pytest.fixture
def service():
    return FakeRemoteService(
        dialogs=make_peers(3),
        messages={"1": make_messages(5), "2": make_messages(60, start_id=100)},
    )


@pytest.fixture
def intents():
    return IntentChannel(capacity=10)


@pytest.fixture
def events():
    return EventChannel(capacity=200)


@pytest.fixture
def coordinator(intents, events, service):
    return SessionCoordinator(intents, events, lambda creds: service, session_path="test.session")


@pytest.fixture
def authenticated(coordinator, events, service):
    """Devuelve una corrutina que deja el coordinador autenticado (sesión guardada)."""
    async def _login():
        service.authorized = True
        await coordinator.handle(Configure(api_id=12345, api_hash="abcde"))
        drain(events)
        service.calls.clear()
        return coordinator
    return _login
