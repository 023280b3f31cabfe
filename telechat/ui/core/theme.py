CLR = {
    "bg":          (246, 247, 251),
    "sidebar":     (255, 255, 255),
    "sidebar_sel": (226, 236, 255),
    "panel":       (255, 255, 255),
    "surface_alt": (240, 242, 247),
    "border":      (222, 225, 232),
    "accent":      (205, 214, 235),
    "primary":     (40, 105, 255),
    "primary_fg":  (255, 255, 255),
    "bubble_rx":   (255, 255, 255),
    "text":        (28, 30, 38),
    "muted":       (113, 113, 130),
    "error":       (200, 52, 52),
}
