from functools import lru_cache

import pygame as pg

CAPTION = "Telechat"
BASE_W, BASE_H = 960, 640
FONT_FAMILY = "Inter,Arial,Helvetica"

# tamaños base (px a escala 1)
_FONT_PX = {"h2": 20, "h3": 16, "p": 15, "xs": 12, "btn": 15}


def init_window(size=(BASE_W, BASE_H)):
    pg.display.set_caption(CAPTION)
    return pg.display.set_mode(size, pg.RESIZABLE)


@lru_cache(maxsize=8)
def _fonts_for(px_scale: int):
    scale = px_scale / 100
    return {
        name: pg.font.SysFont(FONT_FAMILY, max(12, int(px * scale)))
        for name, px in _FONT_PX.items()
    }


def make_fonts(scale: float):
    """SysFont es lento: las fuentes se reutilizan por escala (redondeada al 1%)."""
    return _fonts_for(round(scale * 100))


def compute_layout(w, h):
    s = min(w / BASE_W, h / BASE_H)
    pad = int(16 * s)
    sidebar_w = max(180, int(280 * s))
    header_h = int(72 * s)
    input_h = int(80 * s)

    sidebar = pg.Rect(0, 0, sidebar_w, h)
    chat = pg.Rect(sidebar_w, 0, w - sidebar_w, h)
    header = pg.Rect(chat.x, 0, chat.w, header_h)
    messages = pg.Rect(chat.x, header.bottom, chat.w, h - header_h - input_h)

    # panel centrado de los formularios de login
    login_w = min(w - 2 * pad, 480)
    login = pg.Rect((w - login_w) // 2, int(130 * s), login_w, h - int(130 * s))

    return {
        "s": s,
        "fonts": make_fonts(s),
        "pad": pad,
        "r_lg": int(16 * s),
        "r_sm": int(10 * s),
        "bubble_max": int(520 * s),
        "sidebar": sidebar,
        "chat": chat,
        "header": header,
        "messages": messages,
        "login": login,
    }
