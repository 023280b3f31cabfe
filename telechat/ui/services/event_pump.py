import logging
from typing import Callable, Dict, List, Optional

from telechat.core.managers.channels import EventChannel

Handler = Callable[[object], None]

class EventPump:
    """
    Extrae eventos del EventChannel y los reparte a los servicios
    suscritos por clase de evento.
    - subscribe(LoggedIn, handler)            # 1..N handlers por tipo
    - subscribe_many({LoggedIn: h1, Error: h2})
    - pump(channel, max_events=100)           # drena hasta N eventos pendientes
    - fallback(handler)                       # para eventos sin handler
    """
    def __init__(self):
        self._subs: Dict[type, List[Handler]] = {}
        self._fallback: Optional[Handler] = None

    def subscribe(self, ev_type: type, handler: Handler):
        self._subs.setdefault(ev_type, []).append(handler)

    def subscribe_many(self, mapping: Dict[type, Handler]):
        for t, h in mapping.items():
            self.subscribe(t, h)

    def fallback(self, handler: Handler):
        self._fallback = handler

    def pump(self, channel: EventChannel, max_events: int = 200) -> int:
        # No bloquea: sale en cuanto el canal está vacío
        handled = 0
        for _ in range(max_events):
            evt = channel.try_recv()
            if evt is None:
                break
            handled += 1
            handlers = self._subs.get(type(evt))
            if handlers:
                for h in handlers:
                    try:
                        h(evt)
                    except Exception:
                        # un servicio caído no frena al resto
                        logging.exception("[UI] Handler error for %s", type(evt).__name__)
            elif self._fallback:
                try:
                    self._fallback(evt)
                except Exception:
                    logging.exception("[UI] Fallback handler error")
        return handled
