import pygame as pg

from telechat.ui.core.draw import button, rounded_rect, text
from telechat.ui.core.theme import CLR

BLINK_MS = 500


class InputBar:
    """
    Caja de texto del chat abierto. Enter o el botón Send entregan el texto;
    si el texto no cabe, se muestra su final (lo último tecleado).
    """

    def __init__(self, placeholder: str = "Type a message..."):
        self.value = ""
        self.focus = True
        self.placeholder = placeholder
        self._rects = None   # (barra, caja, botón)

    def _place(self, L):
        chat, pad, s = L["chat"], L["pad"], L["s"]
        h = int(56 * s)
        bar = pg.Rect(chat.x + pad, chat.bottom - pad - h, chat.w - 2 * pad, h)
        inner = bar.inflate(-int(20 * s), -int(20 * s))
        send = pg.Rect(0, 0, int(80 * s), inner.h)
        send.topright = inner.topright
        box = pg.Rect(inner.x, inner.y, send.left - inner.x - int(10 * s), inner.h)
        self._rects = (bar, box, send)

    def _submit(self):
        body = self.value.strip()
        self.value = ""
        return ("send", body) if body else None

    def handle_event(self, e):
        """("send", texto) al pulsar Enter o Send; None en otro caso."""
        if self._rects is None:
            return None
        bar, _box, send = self._rects

        if e.type == pg.MOUSEBUTTONDOWN and e.button == 1:
            self.focus = bar.collidepoint(e.pos)
            if send.collidepoint(e.pos):
                return self._submit()
        elif e.type == pg.TEXTINPUT and self.focus:
            self.value += e.text
        elif e.type == pg.KEYDOWN and self.focus:
            if e.key in (pg.K_RETURN, pg.K_KP_ENTER):
                return self._submit()
            if e.key == pg.K_BACKSPACE:
                # Ctrl+Backspace borra la última palabra
                if pg.key.get_mods() & pg.KMOD_CTRL:
                    self.value = self.value.rstrip().rpartition(" ")[0]
                else:
                    self.value = self.value[:-1]
        return None

    def draw(self, surf, L):
        self._place(L)
        bar, box, send = self._rects
        font = L["fonts"]["p"]
        margin = int(10 * L["s"])

        rounded_rect(surf, bar, CLR["panel"], L["r_sm"])
        rounded_rect(surf, box, CLR["surface_alt"], L["r_sm"])
        button(surf, send, "Send", L["fonts"]["btn"], radius=L["r_sm"])

        room = box.w - 2 * margin
        shown = self.value
        while shown and font.size(shown)[0] > room:
            shown = shown[1:]

        prev_clip = surf.get_clip()
        surf.set_clip(box)
        if shown:
            text(surf, shown, font, CLR["text"], (box.x + margin, box.centery), "midleft")
        else:
            text(surf, self.placeholder, font, CLR["muted"], (box.x + margin, box.centery), "midleft")
        if self.focus and (pg.time.get_ticks() // BLINK_MS) % 2 == 0:
            cx = box.x + margin + font.size(shown)[0] + 1
            pg.draw.line(surf, CLR["muted"], (cx, box.y + 8), (cx, box.bottom - 8), 2)
        surf.set_clip(prev_clip)
