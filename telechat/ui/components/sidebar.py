import pygame as pg
from telechat.ui.core.theme import CLR
from telechat.ui.core.draw import rounded_rect, text, divider, button
from telechat.core.schemas.records import ChatSummary

class Sidebar:
    def __init__(self):
        self.selected = -1
        self.scroll = 0

    #  Helpers internos
    def _item_h(self, L) -> int:
        return int(56 * L["s"])

    def _list_start_y(self, L) -> int:
        return L["sidebar"].y + L["pad"] * 2 + L["fonts"]["h2"].get_linesize()

    def _buttons(self, L):
        r = L["sidebar"]; pad = L["pad"]
        btn_h = int(44 * L["s"])
        half = (r.w - 3 * pad) // 2
        y = r.bottom - pad - btn_h
        refresh = pg.Rect(r.x + pad, y, half, btn_h)
        logout = pg.Rect(refresh.right + pad, y, half, btn_h)
        return refresh, logout

    def _list_view_height(self, L) -> int:
        refresh, _ = self._buttons(L)
        return refresh.top - L["pad"] - self._list_start_y(L)

    def _max_scroll(self, L, n_items: int) -> int:
        content_h = max(0, n_items * self._item_h(L))
        return max(0, content_h - max(0, self._list_view_height(L)))

    def _clamp_scroll(self, L, n_items: int):
        self.scroll = max(0, min(self.scroll, self._max_scroll(L, n_items)))

    def reset(self):
        self.selected = -1
        self.scroll = 0

    #  Eventos
    def handle_event(self, e, L, chats: list[ChatSummary]):
        """
        Devuelve:
          - ("select", ChatSummary) al pulsar una fila,
          - ("refresh", None) / ("logout", None) para los botones inferiores,
          - None si no hay cambio.
        """
        r = L["sidebar"]
        item_h = self._item_h(L)
        start_y = self._list_start_y(L)
        n = len(chats)

        if e.type == pg.MOUSEWHEEL:
            if r.collidepoint(pg.mouse.get_pos()):
                self.scroll -= e.y * (item_h // 2)
                self._clamp_scroll(L, n)
            return None

        if e.type == pg.MOUSEBUTTONDOWN and e.button == 1 and r.collidepoint(e.pos):
            mx, my = e.pos
            refresh, logout = self._buttons(L)
            if refresh.collidepoint(mx, my):
                return ("refresh", None)
            if logout.collidepoint(mx, my):
                return ("logout", None)

            if start_y <= my < refresh.top - L["pad"]:
                idx = ((my - start_y) + self.scroll) // item_h
                if 0 <= idx < n:
                    self.selected = idx
                    return ("select", chats[idx])
        return None

    #  Dibujo
    def draw(self, surf, L, chats: list[ChatSummary], selected_id: str | None = None):
        r = L["sidebar"]; pad = L["pad"]; f = L["fonts"]
        rounded_rect(surf, r, CLR["sidebar"], 0)
        pg.draw.line(surf, CLR["border"], (r.right - 1, r.y), (r.right - 1, r.bottom), 1)

        text(surf, "Chats", f["h2"], CLR["text"], (r.x + pad, r.y + pad))

        list_r = pg.Rect(r.x, self._list_start_y(L), r.w, max(0, self._list_view_height(L)))
        prev_clip = surf.get_clip()
        surf.set_clip(list_r)

        item_h = self._item_h(L)
        y = list_r.y - self.scroll
        for c in chats:
            row = pg.Rect(r.x, y, r.w, item_h)
            if row.bottom >= list_r.top and row.top <= list_r.bottom:
                if selected_id is not None and c.id == selected_id:
                    rounded_rect(surf, row.inflate(-4, -4), CLR["sidebar_sel"], L["r_sm"])
                divider(surf, row.x + pad, row.bottom - 1, row.right - pad)

                av = pg.Rect(r.x + pad, row.y + (item_h - int(36 * L["s"])) // 2, int(36 * L["s"]), int(36 * L["s"]))
                pg.draw.circle(surf, CLR["accent"], av.center, av.w // 2)
                initial = (c.name[:1] or "?").upper()
                text(surf, initial, f["h3"], CLR["text"], av.center, "center")

                text(surf, c.name, f["h3"], CLR["text"], (av.right + 10, row.centery), "midleft")
            y += item_h

        surf.set_clip(prev_clip)

        if not chats:
            text(surf, "No chats yet", f["p"], CLR["muted"], (r.x + pad, list_r.y + pad))

        refresh, logout = self._buttons(L)
        button(surf, refresh, "Refresh", f["btn"], radius=L["r_sm"])
        button(surf, logout, "Logout", f["btn"], bg=CLR["surface_alt"], fg=CLR["text"], radius=L["r_sm"])
