import pygame as pg
from telechat.ui.core.theme import CLR
from telechat.ui.core.draw import rounded_rect, text, divider, button

class ChatHeader:
    def __init__(self):
        self._r_back = None

    def handle_event(self, e):
        """Devuelve "back" si se pulsa el botón de volver."""
        if self._r_back is None:
            return None
        if e.type == pg.MOUSEBUTTONDOWN and e.button == 1 and self._r_back.collidepoint(e.pos):
            return "back"
        if e.type == pg.KEYDOWN and e.key == pg.K_ESCAPE:
            return "back"
        return None

    def draw(self, surf, L, chat_name=None, status=""):
        r = L["header"]; pad = L["pad"]; f = L["fonts"]

        rounded_rect(surf, r, CLR["bg"], 0)
        divider(surf, r.x, r.bottom-1, r.right)

        x = r.x + pad
        if chat_name:
            self._r_back = pg.Rect(x, r.y + pad, int(64 * L["s"]), int(32 * L["s"]))
            button(surf, self._r_back, "Back", f["xs"], bg=CLR["surface_alt"], fg=CLR["text"], radius=L["r_sm"])
            x = self._r_back.right + pad
        else:
            self._r_back = None

        title = f"Chat: {chat_name}" if chat_name else "Select a chat"
        text(surf, title, f["h3"], CLR["text"], (x, r.y + pad))
        color = CLR["error"] if status.startswith("Error") else CLR["muted"]
        text(surf, status, f["xs"], color, (x, r.y + pad + f["h3"].get_linesize() + 2))
