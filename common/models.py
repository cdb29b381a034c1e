"""
Modelos de dados comuns ao cliente do key/value store e ao announcer.
"""
import json
from typing import Dict, Any, Optional
from enum import Enum
from pydantic import BaseModel, Field


# Status considerados sucesso pelo store
SUCCESS_STATUSES = (200, 201)

# Status sintéticos para falhas de transporte (nenhuma resposta recebida)
TRANSPORT_ERROR_STATUS = 595
TRANSPORT_TIMEOUT_STATUS = 599
TRANSPORT_STATUSES = (TRANSPORT_ERROR_STATUS, TRANSPORT_TIMEOUT_STATUS)


class StoreResponse(BaseModel):
    """Resultado uniforme de qualquer operação contra o store."""
    status: int
    body: str = ""
    reason: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    index: Optional[int] = None  # X-Etcd-Index, quando presente

    @property
    def has_error(self) -> bool:
        return has_error(self)

    @property
    def error_message(self) -> str:
        return error_message(self)

    @property
    def is_transport_error(self) -> bool:
        """True quando a requisição nem chegou ao store."""
        return self.status in TRANSPORT_STATUSES

    def payload(self) -> Optional[Any]:
        """
        Decodifica o corpo da resposta como JSON.

        Returns:
            Optional[Any]: Corpo decodificado ou None se vazio/inválido
        """
        if not self.body:
            return None
        try:
            return json.loads(self.body)
        except ValueError:
            return None


def has_error(response: StoreResponse) -> bool:
    """Falso exatamente quando o status é 200 ou 201."""
    return response.status not in SUCCESS_STATUSES


def error_message(response: StoreResponse) -> str:
    """
    Formata a mensagem de erro de uma resposta.

    Args:
        response: Resposta do store

    Returns:
        str: "" em caso de sucesso; "reason (status:N)" para falhas de transporte;
             "message (code:N)" para erros do store com corpo JSON;
             "reason (status:N)" nos demais casos
    """
    if not has_error(response):
        return ""

    if response.status in TRANSPORT_STATUSES:
        return f"{response.reason} (status:{response.status})"

    data = response.payload()
    if isinstance(data, dict) and data.get("errorCode") is not None and data.get("message") is not None:
        return f"{data['message']} (code:{data['errorCode']})"

    return f"{response.reason} (status:{response.status})"


class RequestOptions(BaseModel):
    """Opções por chamada das operações do store."""
    timeout: Optional[float] = None  # None: usa o timeout padrão do cliente
    recursive: bool = False  # apenas get
    sort: bool = False  # apenas get
    ttl: Optional[float] = None  # None: sem expiração; aceita frações de segundo


class AnnounceOptions(BaseModel):
    """Parâmetros de agendamento de um announce."""
    ttl: int = 60  # segundos de vida da chave anunciada
    refresh: float = 10  # intervalo entre refreshes
    timeout: float = 5  # timeout de cada requisição do announce


class AnnounceState(str, Enum):
    """Estados de uma tarefa de announce."""
    IDLE = "idle"
    AWAITING_LOCK = "awaiting_lock"
    REFRESHING = "refreshing"
    RECREATING = "recreating"
    BACKOFF_SCHEDULED = "backoff_scheduled"
    NORMAL_SCHEDULED = "normal_scheduled"
    CANCELLED = "cancelled"
