"""
Agendamento de execuções únicas no event loop do processo hospedeiro.
"""
from __future__ import annotations
import asyncio
from typing import Awaitable, Callable, Optional, Protocol, Set


Callback = Callable[[], Awaitable[None]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class AsyncioTimer:
    """
    Timer sobre o event loop asyncio.

    Após o atraso, o callback (uma corrotina) é executado como uma Task do loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Args:
            loop: Event loop a usar; por padrão, o loop em execução no momento do agendamento
        """
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            # RuntimeError quando não há loop em execução
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, self._spawn, callback)

    def _spawn(self, callback: Callback) -> None:
        task = self.loop.create_task(callback())
        # Mantém referência forte até a Task terminar
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
