import asyncio
import logging
import queue
import threading
from typing import Optional

from telechat.core.schemas.events import Event
from telechat.core.schemas.intents import Intent

DEFAULT_CAPACITY = 100

_CLOSED = object()


class IntentChannel:
    """
    Canal acotado UI -> coordinador.
    - try_send(intent): desde cualquier hilo, nunca bloquea. Devuelve False
      (y descarta el intent) si el canal está cerrado o ya no queda hueco
      contando los intents en vuelo hacia el loop; True si se programó su entrega.
    - send(intent): (async) variante para productores dentro del mismo loop.
    - recv(): (async) siguiente intent, o None cuando el canal está cerrado.
    - close(): cierra el canal; recv() devuelve lo pendiente y después None.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self.capacity = capacity
        self._q: "asyncio.Queue[object]" = asyncio.Queue(maxsize=capacity)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed = False
        self._lock = threading.Lock()
        self._in_flight = 0   # programados con call_soon_threadsafe, aún no en la cola
        self.dropped = 0

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Asocia el canal al loop donde corre el coordinador."""
        self._loop = loop

    @property
    def closed(self) -> bool:
        return self._closed

    # lado UI
    def try_send(self, intent: Intent) -> bool:
        if self._closed or self._loop is None or self._loop.is_closed():
            logging.debug("[Channel] try_send ignorado: canal sin loop o cerrado (%r)", intent)
            return False
        with self._lock:
            if self._q.qsize() + self._in_flight >= self.capacity:
                self.dropped += 1
                logging.warning("[Channel] Cola de intents llena (%d). Descartado: %r", self.capacity, intent)
                return False
            self._in_flight += 1
        self._loop.call_soon_threadsafe(self._offer, intent)
        return True

    def _offer(self, intent: Intent) -> None:
        with self._lock:
            self._in_flight -= 1
        if self._closed:
            return
        try:
            self._q.put_nowait(intent)
        except asyncio.QueueFull:
            self.dropped += 1
            logging.warning("[Channel] Cola de intents llena (%d). Descartado: %r", self.capacity, intent)

    # lado coordinador
    async def send(self, intent: Intent) -> None:
        if self._closed:
            return
        await self._q.put(intent)

    async def recv(self) -> Optional[Intent]:
        if self._closed and self._q.empty():
            return None
        item = await self._q.get()
        if item is _CLOSED:
            return None
        return item

    def close(self) -> None:
        """Thread-safe. Despierta a un recv() pendiente."""
        if self._loop is not None and not self._loop.is_closed():
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is not self._loop:
                self._loop.call_soon_threadsafe(self._close)
                return
        self._close()

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._q.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # recv() vacía lo pendiente y luego ve el canal cerrado
            pass


class EventChannel:
    """
    Canal acotado coordinador -> UI.
    - send(event): (async) espera sin bloquear el loop mientras la cola esté llena.
    - try_recv(): desde el hilo de la UI, no bloquea; None si no hay eventos.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, retry_interval: float = 0.05):
        self.capacity = capacity
        self.retry_interval = retry_interval
        self._q: "queue.Queue[Event]" = queue.Queue(maxsize=capacity)
        self._closed = False

    async def send(self, event: Event) -> bool:
        while True:
            try:
                self._q.put_nowait(event)
                return True
            except queue.Full:
                if self._closed:
                    logging.warning("[Channel] UI cerrada con la cola llena. Evento descartado: %r", event)
                    return False
                await asyncio.sleep(self.retry_interval)

    def try_recv(self) -> Optional[Event]:
        try:
            return self._q.get_nowait()
        except queue.Empty:
            return None

    def close(self) -> None:
        self._closed = True

    def qsize(self) -> int:
        return self._q.qsize()
