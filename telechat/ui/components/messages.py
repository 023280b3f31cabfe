import pygame as pg
from telechat.ui.core.theme import CLR
from telechat.ui.core.draw import rounded_rect, text
from telechat.core.schemas.records import MessageRecord

class MessagesView:
    def __init__(self):
        self.wrap_cache = {}
        self.scroll = 0          # px desde el fondo (0 = últimos mensajes)
        self._content_h = 0

    # ----------------------------
    # helpers de texto
    # ----------------------------
    def _wrap(self, font, body: str, maxw: int):
        """
        Envuelve por palabras respetando saltos de línea (\\n).
        Las 'palabras' más anchas que maxw (URLs, hashes) se parten por ancho.
        Cachea por (font, body, maxw).
        """
        key = (id(font), body, maxw)
        cached = self.wrap_cache.get(key)
        if cached:
            return cached

        out_lines = []
        for para in (body or "").split("\n"):
            if para == "":
                out_lines.append("")
                continue

            cur = ""
            for w in para.split(" "):
                test = (cur + " " + w) if cur else w
                if font.size(test)[0] <= maxw:
                    cur = test
                    continue
                if cur:
                    out_lines.append(cur)
                    cur = ""
                while font.size(w)[0] > maxw and len(w) > 1:
                    cut = len(w)
                    while cut > 1 and font.size(w[:cut])[0] > maxw:
                        cut -= 1
                    out_lines.append(w[:cut])
                    w = w[cut:]
                cur = w
            if cur:
                out_lines.append(cur)

        out_lines = out_lines or [""]
        self.wrap_cache[key] = out_lines
        return out_lines

    def _bubble(self, L, m: MessageRecord):
        f = L["fonts"]; font = f["p"]
        maxw = int(min(L["bubble_max"], L["messages"].w * 0.7))
        pad_bub = int(12 * L["s"])
        lines = self._wrap(font, m.text, maxw)
        head = f"{m.sender}  ·  {m.date}"
        text_w = max([font.size(line)[0] for line in lines] + [f["xs"].size(head)[0]])
        bw = min(int(text_w + pad_bub * 2), maxw + pad_bub * 2)
        bh = int(f["xs"].get_linesize() + 4 + len(lines) * font.get_linesize() + pad_bub * 2)
        return lines, head, bw, bh, pad_bub

    # ----------------------------
    # eventos
    # ----------------------------
    def handle_event(self, e, L):
        if e.type == pg.MOUSEWHEEL and L["messages"].collidepoint(pg.mouse.get_pos()):
            step = int(40 * L["s"])
            max_scroll = max(0, self._content_h - L["messages"].h)
            self.scroll = max(0, min(self.scroll + e.y * step, max_scroll))

    def reset(self):
        self.scroll = 0

    # ----------------------------
    # render general (pegado al fondo, como un chat)
    # ----------------------------
    def draw(self, surf, L, messages: list[MessageRecord]):
        r = L["messages"]; pad = L["pad"]; f = L["fonts"]
        gap = int(10 * L["s"])
        bubbles = [self._bubble(L, m) for m in messages]
        self._content_h = sum(b[3] + gap for b in bubbles) + pad

        prev_clip = surf.get_clip()
        surf.set_clip(r)

        y = r.bottom - pad - self._content_h + self.scroll
        x = r.x + pad * 2
        for lines, head, bw, bh, pad_bub in bubbles:
            if y + bh >= r.top and y <= r.bottom:
                br = pg.Rect(int(x), int(y), int(bw), int(bh))
                rounded_rect(surf, br, CLR["bubble_rx"], L["r_lg"])
                text(surf, head, f["xs"], CLR["muted"], (br.x + pad_bub, br.y + pad_bub))
                ty = br.y + pad_bub + f["xs"].get_linesize() + 4
                for line in lines:
                    text(surf, line, f["p"], CLR["text"], (br.x + pad_bub, ty))
                    ty += f["p"].get_linesize()
            y += bh + gap

        surf.set_clip(prev_clip)

        if not messages:
            text(surf, "No messages", f["p"], CLR["muted"], r.center, "center")
