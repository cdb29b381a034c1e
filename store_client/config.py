"""
Configurações do cliente do key/value store.
"""
from common.utils import get_env_str, get_env_float


# Endereço padrão do store ([scheme://][user[:pass]@]host[:port])
STORE_ENDPOINT = get_env_str("STORE_ENDPOINT", "127.0.0.1:2379")

# Timeout padrão por requisição
STORE_TIMEOUT = get_env_float("STORE_TIMEOUT", 1.0)  # 1 segundo

# Raiz do espaço de chaves versionado
STORE_KEYS_PREFIX = get_env_str("STORE_KEYS_PREFIX", "/v2/keys")

# Cabeçalho com o índice de alterações do store
STORE_INDEX_HEADER = get_env_str("STORE_INDEX_HEADER", "X-Etcd-Index")
