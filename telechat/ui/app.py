import logging

import pygame as pg
import pygame_gui

from telechat.core.managers.channels import EventChannel
from telechat.ui.components.header import ChatHeader
from telechat.ui.components.input_bar import InputBar
from telechat.ui.components.login_form import LoginForm
from telechat.ui.components.messages import MessagesView
from telechat.ui.components.sidebar import Sidebar
from telechat.ui.core.draw import text
from telechat.ui.core.layout import compute_layout, init_window
from telechat.ui.core.theme import CLR
from telechat.ui.services.event_pump import EventPump
from telechat.ui.services.session import SessionService
from telechat.ui.state.models import GuiStage


def _dispatch_form(session: SessionService, form: LoginForm, action: str, values: dict):
    if action == "configure":
        session.configure(values.get("api_id", ""), values.get("api_hash", ""))
    elif action == "login":
        session.request_code(values.get("phone", ""))
    elif action == "code":
        session.submit_code(values.get("code", ""))
        form.clear_field("code")
    elif action == "password":
        session.submit_password(values.get("password", ""))
        form.clear_field("password")


def _draw_login(screen, L, status: str):
    w = screen.get_width()
    fonts = L["fonts"]
    text(screen, "Telegram Client", fonts["h2"], CLR["text"], (w // 2, 2 * L["pad"] + 8), "midtop")
    color = CLR["error"] if status.startswith("Error") else CLR["muted"]
    text(screen, status, fonts["p"], color, (w // 2, 4 * L["pad"] + 12), "midtop")


def _main_loop(
    events: EventChannel,
    pump: EventPump,
    session: SessionService,
    *,
    window_size=(960, 640),
    fps: int = 60,
    defaults: dict | None = None,
):
    screen = init_window(window_size)
    clock = pg.time.Clock()

    manager = pygame_gui.UIManager(screen.get_size())
    form = LoginForm(manager, defaults=defaults)

    pump.fallback(lambda ev: logging.info("[UI] evento no manejado: %r", ev))

    sidebar = Sidebar()
    header = ChatHeader()
    messages = MessagesView()
    inputbar = InputBar()

    running = True
    while running:
        dt = clock.tick(fps)
        time_delta = dt / 1000.0
        state = session.state

        w, h = screen.get_size()
        L = compute_layout(w, h)
        logged_in = state.stage == GuiStage.LOGGED_IN

        # input
        for e in pg.event.get():
            if e.type == pg.QUIT:
                running = False
                break
            if e.type == pg.KEYDOWN and e.key == pg.K_q and (pg.key.get_mods() & pg.KMOD_CTRL):
                running = False
                break
            if e.type in (pg.VIDEORESIZE, pg.WINDOWSIZECHANGED):
                manager.set_window_resolution(screen.get_size())

            manager.process_events(e)

            if not logged_in:
                res = form.process_event(e)
                if res:
                    _dispatch_form(session, form, *res)
                continue

            picked = sidebar.handle_event(e, L, state.chats)
            if picked:
                kind, chat = picked
                if kind == "select":
                    messages.reset()
                    session.select_chat(chat)
                elif kind == "refresh":
                    session.refresh_chats()
                elif kind == "logout":
                    session.logout()
                continue

            if state.selected_chat is not None:
                if header.handle_event(e) == "back":
                    sidebar.reset()
                    session.back_to_chats()
                    continue
                messages.handle_event(e, L)
                res = inputbar.handle_event(e)
                if res:
                    session.send_text(res[1])

        # EVENTOS (coordinador -> UI)
        pump.pump(events, max_events=100)

        # - RENDER -
        state = session.state
        screen.fill(CLR["bg"])

        if state.stage == GuiStage.LOGGED_IN:
            form.sync(state.stage)
            selected = state.selected_chat
            sidebar.draw(screen, L, state.chats, selected.id if selected else None)
            header.draw(screen, L, selected.name if selected else None, state.status)
            if selected is not None:
                messages.draw(screen, L, state.messages)
                inputbar.draw(screen, L)
        else:
            form.place(L["login"].topleft)
            form.sync(state.stage)
            _draw_login(screen, L, state.status)

        manager.update(time_delta)
        manager.draw_ui(screen)
        pg.display.flip()


def run(
    events: EventChannel,
    pump: EventPump,
    session: SessionService,
    *,
    window_size=(960, 640),
    fps: int = 60,
    defaults: dict | None = None,
):
    pg.init()
    try:
        _main_loop(events, pump, session, window_size=window_size, fps=fps, defaults=defaults)
    finally:
        pg.quit()
