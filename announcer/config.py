"""
Configurações do announcer.
"""
from common.utils import get_env_int, get_env_str, get_env_float


# Padrões de um announce
ANNOUNCE_TTL = get_env_int("ANNOUNCE_TTL", 60)  # um minuto
ANNOUNCE_REFRESH = get_env_float("ANNOUNCE_REFRESH", 10.0)  # a cada 10 segundos
ANNOUNCE_TIMEOUT = get_env_float("ANNOUNCE_TIMEOUT", 5.0)  # 5 segundos por requisição

# Atraso da primeira execução, para não fazer I/O durante o registro
ANNOUNCE_FIRST_DELAY = get_env_float("ANNOUNCE_FIRST_DELAY", 0.1)

# Reagendamento (e expiração do lock) após uma falha
ANNOUNCE_BACKOFF_DELAY = get_env_float("ANNOUNCE_BACKOFF_DELAY", 1.0)

# Sufixo da chave de exclusão mútua
ANNOUNCE_LOCK_SUFFIX = get_env_str("ANNOUNCE_LOCK_SUFFIX", "_lock")
