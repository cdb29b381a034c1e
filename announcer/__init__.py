"""
Announcer: mantém uma chave viva no key/value store.

Key responsibilities:
- Renovar periodicamente o TTL da chave anunciada
- Recriar a chave quando a renovação falhar
- Limitar, via lock compartilhado, quantos workers tocam o store por intervalo
"""
from announcer.announcer import AnnounceTask, announce, resolve_announce_options
from announcer.lock_store import InMemoryLockStore, LockStore
from announcer.timer import AsyncioTimer, Timer
from common.models import AnnounceOptions, AnnounceState

__version__ = "1.0.0"
__all__ = [
    "announce",
    "AnnounceTask",
    "AnnounceOptions",
    "AnnounceState",
    "resolve_announce_options",
    "LockStore",
    "InMemoryLockStore",
    "Timer",
    "AsyncioTimer",
]
