"""
Espaço de chaves compartilhado usado como exclusão mútua entre workers.
"""
from __future__ import annotations
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple


class LockStore(Protocol):
    def add(self, key: str, value: Any, ttl: float) -> bool: ...
    def set(self, key: str, value: Any, ttl: float) -> None: ...
    def get(self, key: str) -> Optional[Any]: ...
    def delete(self, key: str) -> None: ...


class InMemoryLockStore:
    """
    Dicionário com expiração por chave, seguro entre threads.

    add() só insere quando a chave está ausente ou expirada; set() sobrescreve.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}

    def _expired(self, key: str, now: float) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return True
        expires_at = entry[1]
        if expires_at is not None and expires_at <= now:
            del self._data[key]
            return True
        return False

    def _expiry(self, ttl: Optional[float], now: float) -> Optional[float]:
        # ttl None ou 0: sem expiração
        if not ttl:
            return None
        return now + ttl

    def add(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        with self._lock:
            now = self._clock()
            if not self._expired(key, now):
                return False
            self._data[key] = (value, self._expiry(ttl, now))
            return True

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            now = self._clock()
            self._data[key] = (value, self._expiry(ttl, now))

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if self._expired(key, self._clock()):
                return None
            return self._data[key][0]

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def ttl(self, key: str) -> Optional[float]:
        """Segundos restantes até a expiração (None se ausente ou sem expiração)."""
        with self._lock:
            now = self._clock()
            if self._expired(key, now):
                return None
            expires_at = self._data[key][1]
            return None if expires_at is None else expires_at - now
