"""
Announce de uma chave no key/value store.

Mantém uma chave viva com TTL: a cada execução, sob um lock compartilhado,
renova o TTL da chave e, se a renovação falhar, recria a chave. A tarefa se
reagenda sozinha no timer do processo hospedeiro e roda até ser cancelada.
"""
import logging
import random
from typing import Any, Mapping, Optional, Union

from common.metrics import announcer_metrics
from common.models import AnnounceOptions, AnnounceState, has_error, error_message
from announcer.config import (
    ANNOUNCE_TTL,
    ANNOUNCE_REFRESH,
    ANNOUNCE_TIMEOUT,
    ANNOUNCE_FIRST_DELAY,
    ANNOUNCE_BACKOFF_DELAY,
    ANNOUNCE_LOCK_SUFFIX,
)
from announcer.lock_store import LockStore
from announcer.timer import AsyncioTimer, Timer

AnnounceOptionsArg = Union[AnnounceOptions, Mapping[str, Any], None]


def resolve_announce_options(opts: AnnounceOptionsArg = None) -> AnnounceOptions:
    """
    Completa as opções do announce com os padrões configurados.

    Args:
        opts: AnnounceOptions, dicionário parcial (ttl, refresh, timeout) ou None

    Returns:
        AnnounceOptions: Opções completas
    """
    if isinstance(opts, AnnounceOptions):
        return opts

    data = {
        "ttl": ANNOUNCE_TTL,
        "refresh": ANNOUNCE_REFRESH,
        "timeout": ANNOUNCE_TIMEOUT,
    }
    if opts:
        data.update({k: v for k, v in opts.items() if v is not None})
    return AnnounceOptions(**data)


class AnnounceTask:
    """
    Tarefa recorrente de announce de uma chave.

    Estados: idle -> awaiting_lock -> (refreshing -> [recreating]) ->
    normal_scheduled | backoff_scheduled -> awaiting_lock ...
    """

    def __init__(self, client, key: str, value: Any, lock_store: LockStore,
                 options: AnnounceOptions, timer: Optional[Timer] = None,
                 rng: Optional[random.Random] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Inicializa a tarefa (sem agendá-la).

        Args:
            client: StoreClient usado exclusivamente por esta tarefa
            key: Chave a manter viva
            value: Valor gravado quando a chave precisa ser recriada
            lock_store: Espaço compartilhado para o lock entre workers
            options: TTL, intervalo de refresh e timeout
            timer: Facilidade de agendamento (padrão: AsyncioTimer)
            rng: Gerador aleatório para o jitter
            logger: Logger configurado
        """
        self.client = client
        self.key = key
        self.value = value
        self.lock_store = lock_store
        self.options = options
        self.lock_key = key + ANNOUNCE_LOCK_SUFFIX
        self.timer = timer or AsyncioTimer()
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)

        self.state = AnnounceState.IDLE
        self.ticks = 0
        self.next_delay: Optional[float] = None
        self.cancelled = False
        self._handle = None

    def start(self) -> bool:
        """Agenda a primeira execução."""
        return self._schedule(ANNOUNCE_FIRST_DELAY)

    def cancel(self) -> None:
        """Interrompe os reagendamentos e cancela a execução pendente."""
        self.cancelled = True
        self.state = AnnounceState.CANCELLED
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def stop(self) -> None:
        """Cancela a tarefa e fecha as conexões do cliente."""
        self.cancel()
        await self.client.close()

    def _schedule(self, delay: float) -> bool:
        if self.cancelled:
            return False
        try:
            self._handle = self.timer.call_later(delay, self._think)
        except RuntimeError as e:
            self.logger.error(f"falha ao criar timer para announce {self.key}: {e}")
            return False
        self.next_delay = delay
        return True

    def _jitter(self) -> float:
        # Espalha os workers que perderam o lock ao longo do intervalo
        return self.rng.uniform(1, max(1.0, float(self.options.refresh)))

    async def _think(self) -> None:
        self._handle = None
        if self.cancelled:
            return

        self.ticks += 1
        self.state = AnnounceState.AWAITING_LOCK

        try:
            acquired = self.lock_store.add(self.lock_key, True, self.options.refresh)
        except Exception:
            self.logger.exception(f"announce {self.key}: erro ao obter o lock {self.lock_key}")
            announcer_metrics["ticks_total"].labels(outcome="failed").inc()
            self.state = AnnounceState.BACKOFF_SCHEDULED
            self._schedule(self._jitter())
            return

        if not acquired:
            delay = self._jitter()
            self.logger.debug(f"announce {self.key}: lock ocupado, nova tentativa em {delay:.2f}s")
            announcer_metrics["ticks_total"].labels(outcome="lock_busy").inc()
            self.state = AnnounceState.BACKOFF_SCHEDULED
            self._schedule(delay)
            return

        try:
            outcome = await self._refresh_or_recreate()
        except Exception:
            self.logger.exception(f"announce {self.key}: erro inesperado")
            outcome = "failed"
        announcer_metrics["ticks_total"].labels(outcome=outcome).inc()

        if self.cancelled:
            return

        if outcome == "refreshed":
            self.state = AnnounceState.NORMAL_SCHEDULED
            self._schedule(self.options.refresh)
        else:
            # Libera o lock mais cedo para outro worker tentar
            try:
                self.lock_store.set(self.lock_key, True, ANNOUNCE_BACKOFF_DELAY)
            except Exception:
                self.logger.exception(f"announce {self.key}: erro ao encurtar o lock {self.lock_key}")
            self.state = AnnounceState.BACKOFF_SCHEDULED
            self._schedule(ANNOUNCE_BACKOFF_DELAY)

    async def _refresh_or_recreate(self) -> str:
        """
        Renova o TTL da chave; se falhar, recria a chave com o valor.

        Returns:
            str: "refreshed", "recreated" ou "failed"
        """
        self.state = AnnounceState.REFRESHING
        r = await self.client.refresh(self.key, ttl=self.options.ttl, timeout=self.options.timeout)
        if not has_error(r):
            return "refreshed"

        self.logger.error(f"announce {self.key} refresh error: {error_message(r)}")

        self.state = AnnounceState.RECREATING
        r = await self.client.set(self.key, self.value, ttl=self.options.ttl, timeout=self.options.timeout)
        if has_error(r):
            self.logger.error(f"announce {self.key} set error: {error_message(r)}")
            return "failed"

        return "recreated"


def announce(client, key: str, value: Any, lock_store: LockStore,
             opts: AnnounceOptionsArg = None, *, timer: Optional[Timer] = None,
             rng: Optional[random.Random] = None,
             logger: Optional[logging.Logger] = None) -> AnnounceTask:
    """
    Inicia o announce de uma chave e retorna imediatamente.

    A tarefa usa um clone de client, para não disputar o índice com o chamador.
    A primeira execução ocorre após um pequeno atraso; nenhuma falha é
    propagada ao chamador, apenas registrada em log.

    Args:
        client: StoreClient de origem
        key: Chave a manter viva
        value: Valor da chave
        lock_store: Espaço compartilhado para o lock entre workers
        opts: ttl (60s), refresh (10s), timeout (5s)
        timer: Facilidade de agendamento (padrão: AsyncioTimer no loop em execução)
        rng: Gerador aleatório para o jitter
        logger: Logger configurado

    Returns:
        AnnounceTask: Tarefa agendada, que pode ser cancelada
    """
    task = AnnounceTask(
        client.clone(),
        key,
        value,
        lock_store,
        resolve_announce_options(opts),
        timer=timer,
        rng=rng,
        logger=logger,
    )
    task.start()
    return task
