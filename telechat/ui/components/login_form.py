import pygame as pg
import pygame_gui

from telechat.ui.state.models import GuiStage

# etapa -> (campos [(clave, etiqueta, oculto)], texto del botón, acción)
_FORMS = {
    GuiStage.CONFIGURATION: ([("api_id", "API ID:", False), ("api_hash", "API Hash:", False)],
                             "Save Configuration", "configure"),
    GuiStage.LOGIN_PHONE:   ([("phone", "Phone Number:", False)], "Send Code", "login"),
    GuiStage.LOGIN_CODE:    ([("code", "Login Code:", False)], "Sign In", "code"),
    GuiStage.LOGIN_PASSWORD: ([("password", "2FA Password:", True)], "Verify Password", "password"),
}


class LoginForm:
    """
    Formularios de configuración/login sobre pygame_gui.
    - sync(stage): reconstruye los widgets si cambió la etapa
    - process_event(e) -> (acción, {clave: texto}) | None   (botón o Enter)
    """
    def __init__(self, manager: pygame_gui.UIManager, defaults: dict | None = None):
        self.manager = manager
        self.values: dict = dict(defaults or {})
        self.stage: GuiStage | None = None
        self._entries: dict = {}
        self._widgets: list = []
        self._button = None
        self._action = None
        self._origin = (0, 0)

    # --- helpers ---
    def _clear(self):
        for key, entry in self._entries.items():
            self.values[key] = entry.get_text()
        for w in self._widgets:
            w.kill()
        self._widgets.clear()
        self._entries.clear()
        self._button = None
        self._action = None

    def _build(self, stage: GuiStage):
        self._clear()
        self.stage = stage
        form = _FORMS.get(stage)
        if not form:
            return
        fields, label, action = form
        x, y = self._origin
        label_w, entry_w, row_h = 140, 320, 36

        for key, caption, hidden in fields:
            lbl = pygame_gui.elements.UILabel(
                relative_rect=pg.Rect(x, y, label_w, row_h), text=caption, manager=self.manager)
            entry = pygame_gui.elements.UITextEntryLine(
                relative_rect=pg.Rect(x + label_w, y, entry_w, row_h), manager=self.manager)
            # los secretos no se recuerdan entre pantallas
            if not hidden and self.values.get(key):
                entry.set_text(str(self.values[key]))
            if hidden:
                entry.set_text_hidden(True)
            self._widgets += [lbl, entry]
            self._entries[key] = entry
            y += row_h + 10

        self._button = pygame_gui.elements.UIButton(
            relative_rect=pg.Rect(x + label_w, y + 4, 200, row_h), text=label, manager=self.manager)
        self._widgets.append(self._button)
        self._action = action

        first = next(iter(self._entries.values()), None)
        if first is not None:
            first.focus()

    # --- API ---
    def place(self, origin: tuple[int, int]):
        if origin != self._origin:
            self._origin = origin
            if self.stage is not None:
                self._build(self.stage)

    def sync(self, stage: GuiStage):
        if stage != self.stage:
            self._build(stage)

    def process_event(self, e):
        if self._action is None:
            return None
        fire = False
        if e.type == pygame_gui.UI_BUTTON_PRESSED and e.ui_element == self._button:
            fire = True
        elif e.type == pygame_gui.UI_TEXT_ENTRY_FINISHED and e.ui_element in self._entries.values():
            fire = True
        if not fire:
            return None
        return self._action, {k: entry.get_text() for k, entry in self._entries.items()}

    def clear_field(self, key: str):
        entry = self._entries.get(key)
        if entry is not None:
            entry.set_text("")
        self.values.pop(key, None)
