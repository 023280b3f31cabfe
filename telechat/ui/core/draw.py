import pygame as pg
from telechat.ui.core.theme import CLR

def rounded_rect(surf, rect, color, radius):
    pg.draw.rect(surf, color, rect, border_radius=radius)

def text(surf, s, font, color, pos, anchor="topleft"):
    img = font.render(s, True, color)
    r = img.get_rect(**{anchor: pos})
    surf.blit(img, r)
    return r

def divider(surf, x1, y, x2):
    pg.draw.line(surf, CLR["border"], (x1, y), (x2, y), 1)

def button(surf, rect, label, font, bg=None, fg=None, radius=8):
    rounded_rect(surf, rect, bg or CLR["primary"], radius)
    text(surf, label, font, fg or CLR["primary_fg"], rect.center, "center")
