"""Property tests: random intent sequences against a small reference model."""
import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from telechat.coordinator.session_coordinator import DIALOG_LIMIT, SessionCoordinator
from telechat.core.enums.enums import AuthStage
from telechat.core.managers.channels import EventChannel, IntentChannel
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
from telechat.core.schemas.intents import (
    Configure,
    Login,
    Logout,
    RefreshChats,
    SelectChat,
    SendCode,
    SendPassword,
)
from telechat.remote.base import RemotePeer

from conftest import FakeRemoteService, drain, make_messages

INTENTS = st.sampled_from([
    Configure(api_id=1, api_hash="h"),
    Login("+1555"),
    SendCode("12345"),
    SendPassword("pw"),
    RefreshChats(),
    SelectChat("1"),
    SelectChat("42"),
    Logout(),
])
OUTCOMES = st.sampled_from(["ok", "fail", "password"])

_STAGES = {
    "unconf": AuthStage.UNCONFIGURED,
    "phone": AuthStage.AWAITING_PHONE,
    "code": AuthStage.AWAITING_CODE,
    "pw": AuthStage.AWAITING_PASSWORD,
    "pw_used": AuthStage.AWAITING_PASSWORD,
    "auth": AuthStage.AUTHENTICATED,
}


def model_step(state, intent, outcome):
    """Devuelve (nuevo estado, tipos de evento esperados)."""
    if state == "unconf":
        return ("phone", [Configured]) if isinstance(intent, Configure) else (state, [Error])
    if isinstance(intent, Configure):
        return state, [Error]
    if isinstance(intent, Login):
        if state == "auth" or outcome == "fail":
            return state, [Error]
        return "code", [CodeSent]
    if isinstance(intent, SendCode):
        if state != "code" or outcome == "fail":
            return state, [Error]
        if outcome == "password":
            return "pw", [PasswordRequired]
        return "auth", [LoggedIn, ChatsLoaded]
    if isinstance(intent, SendPassword):
        if state != "pw":
            return state, [Error]
        if outcome == "fail":
            return "pw_used", [Error]
        return "auth", [LoggedIn, ChatsLoaded]
    if state != "auth":
        return state, [Error]
    if isinstance(intent, RefreshChats):
        return state, [ChatsLoaded]
    if isinstance(intent, SelectChat):
        return state, [MessagesLoaded] if intent.chat_id == "1" else [Error]
    if isinstance(intent, Logout):
        return "phone", [LoggedOut]
    raise AssertionError(intent)


async def _run(steps):
    service = FakeRemoteService(messages={"1": make_messages(4)})
    events = EventChannel(capacity=500)
    coord = SessionCoordinator(IntentChannel(capacity=10), events, lambda creds: service)

    state = "unconf"
    for intent, outcome in steps:
        service.outcome = outcome
        await coord.handle(intent)
        state, expected = model_step(state, intent, outcome)

        got = drain(events)
        assert [type(e) for e in got] == expected, (intent, outcome)
        assert coord.state.stage == _STAGES[state]
        if state != "auth":
            assert len(coord.cache) == 0
            assert coord.selected_chat is None
    return service


@settings(max_examples=150, deadline=None)
@given(st.lists(st.tuples(INTENTS, OUTCOMES), max_size=25))
def test_coordinator_matches_model(steps):
    """Test that every intent yields exactly the modelled events and stage."""
    asyncio.run(_run(steps))


@settings(max_examples=100, deadline=None)
@given(st.lists(st.tuples(INTENTS, OUTCOMES), max_size=25))
def test_login_tokens_are_never_reused(steps):
    """Test that no login token reaches sign_in after it produced a password request."""
    service = asyncio.run(_run(steps))
    assert service.reused_tokens == []


async def _refresh_then_select_all(peer_ids):
    service = FakeRemoteService(
        authorized=True,
        dialogs=[RemotePeer(id=i, name=f"Chat {i}") for i in peer_ids],
        messages={str(i): make_messages(2, start_id=abs(i)) for i in peer_ids[::3]},
    )
    events = EventChannel(capacity=500)
    coord = SessionCoordinator(IntentChannel(capacity=10), events, lambda creds: service)
    await coord.handle(Configure(api_id=1, api_hash="h"))
    drain(events)

    await coord.handle(RefreshChats())
    (listed,) = drain(events)
    assert isinstance(listed, ChatsLoaded)
    assert len(listed.chats) == min(len(peer_ids), DIALOG_LIMIT)

    for chat in listed.chats:
        await coord.handle(SelectChat(chat.id))
        got = drain(events)
        assert [type(e) for e in got] == [MessagesLoaded], chat.id
        assert coord.selected_chat == chat.id


@settings(max_examples=60, deadline=None)
@given(st.lists(st.integers(min_value=-10**13, max_value=10**13), unique=True, max_size=70))
def test_every_listed_chat_can_be_selected(peer_ids):
    """Test that any id from a fresh chat listing is accepted by SelectChat."""
    asyncio.run(_refresh_then_select_all(peer_ids))
