import asyncio
import contextlib
import logging
import threading
from typing import Awaitable, Callable, Optional


class WorkerThread:
    """
    Hilo de trabajo con su propio event loop de asyncio.
    Ejecuta una única corrutina larga (el coordinador) y todo lo que ésta
    lance en el mismo loop (p.ej. las tareas de conexión de Telethon).
    """
    def __init__(self, main: Callable[[], Awaitable[None]], name: str = "coordinator"):
        self._main = main
        self._started = threading.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self.error: Optional[BaseException] = None
        self.thread = threading.Thread(target=self._thread_fn, name=name, daemon=True)

    def _thread_fn(self):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        logging.info("[Worker] Hilo iniciado.")

        async def runner():
            self._task = asyncio.current_task()
            self._started.set()
            await self._main()

        try:
            loop.run_until_complete(runner())
        except asyncio.CancelledError:
            logging.info("[Worker] Corrutina principal cancelada.")
        except Exception as e:
            self.error = e
            logging.exception("[Worker] Error inesperado en el loop")
        finally:
            self._started.set()
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            logging.info("[Worker] Hilo terminado.")

    @property
    def loop(self) -> Optional[asyncio.AbstractEventLoop]:
        return self._loop

    def start(self, timeout: float = 5.0) -> asyncio.AbstractEventLoop:
        """Arranca el hilo y espera a que el loop esté corriendo."""
        self.thread.start()
        if not self._started.wait(timeout):
            raise RuntimeError("WorkerThread: el loop no arrancó a tiempo")
        return self._loop

    def is_alive(self) -> bool:
        return self.thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        self.thread.join(timeout)
        return not self.thread.is_alive()

    def stop(self, timeout: float = 5.0) -> None:
        """
        Espera a que la corrutina termine sola (el llamador ya cerró el canal
        de entrada); si no termina a tiempo, la cancela.
        """
        if self.join(timeout):
            return
        loop, task = self._loop, self._task
        if loop is not None and task is not None and not loop.is_closed():
            logging.warning("[Worker] No terminó en %.1fs. Cancelando.", timeout)
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(task.cancel)
        self.join(timeout)
