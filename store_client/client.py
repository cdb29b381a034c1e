"""
Cliente para o key/value store versionado (API de chaves v2 sobre HTTP).

Cada operação devolve um StoreResponse e nunca levanta exceção: falhas de
transporte e erros do store são codificados na própria resposta.
"""
import base64
import logging
import time
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import httpx

from common.communication import HttpClient
from common.metrics import store_metrics
from common.models import (
    RequestOptions,
    StoreResponse,
    TRANSPORT_ERROR_STATUS,
    TRANSPORT_TIMEOUT_STATUS,
    has_error,
    error_message,
)
from common.uri import add_param, join_uri, parse_uri
from store_client.config import (
    STORE_ENDPOINT,
    STORE_TIMEOUT,
    STORE_KEYS_PREFIX,
    STORE_INDEX_HEADER,
)

OptionsArg = Union[RequestOptions, Mapping[str, Any], None]

_OPTION_FIELDS = ("timeout", "recursive", "sort", "ttl")


def resolve_options(opts: OptionsArg = None, **overrides: Any) -> RequestOptions:
    """
    Normaliza as opções de uma chamada.

    Args:
        opts: RequestOptions, dicionário com as mesmas chaves ou None
        **overrides: Opções passadas como argumentos nomeados (têm precedência)

    Returns:
        RequestOptions: Opções resolvidas
    """
    if isinstance(opts, RequestOptions) and not overrides:
        return opts

    data: Dict[str, Any] = {}
    if isinstance(opts, RequestOptions):
        data.update({name: getattr(opts, name) for name in _OPTION_FIELDS})
    elif opts:
        data.update(opts)
    data.update(overrides)
    return RequestOptions(**data)


def _describe(exc: Exception) -> str:
    # Algumas exceções do httpx não trazem mensagem
    return str(exc) or exc.__class__.__name__


def _number(value: float) -> Any:
    # 60.0 vai na query como "60"
    return int(value) if float(value).is_integer() else value


class StoreClient:
    """
    Cliente do key/value store.

    Mantém o último índice de alterações observado (index), usado por wait()
    para aguardar a próxima alteração de uma chave.
    """

    def __init__(self, endpoint: Optional[str] = None, user: Optional[str] = None,
                 password: Optional[str] = None, timeout: Optional[float] = None,
                 logger: Optional[logging.Logger] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Inicializa o cliente.

        Args:
            endpoint: Endereço do store ([scheme://][user[:pass]@]host[:port][/prefix]);
                None usa STORE_ENDPOINT
            user: Usuário para autenticação básica (tem precedência sobre o do endpoint)
            password: Senha para autenticação básica
            timeout: Timeout padrão por requisição em segundos
            logger: Logger configurado
            transport: Transporte httpx alternativo, repassado aos clones
        """
        if endpoint is None:
            endpoint = STORE_ENDPOINT
        parsed = parse_uri(endpoint)
        if parsed is None or not parsed.host:
            raise ValueError(f"Endereço inválido para o store: {endpoint!r}")

        self.endpoint = endpoint
        self.user = user
        self.password = password
        self.timeout = STORE_TIMEOUT if timeout is None else timeout
        self.logger = logger or logging.getLogger(__name__)
        self.transport = transport
        self.index = 0

        self._parsed = parsed
        self._base_url = parsed.base_url()
        self.http = HttpClient(timeout=self.timeout, transport=transport)

    def clone(self) -> "StoreClient":
        """
        Cria um novo cliente com o mesmo endpoint, credenciais e timeout.

        O clone começa com index zerado e evolui de forma independente.
        """
        return StoreClient(
            self.endpoint,
            user=self.user,
            password=self.password,
            timeout=self.timeout,
            logger=self.logger,
            transport=self.transport,
        )

    async def close(self):
        """Fecha as conexões HTTP."""
        await self.http.close()

    @property
    def base_url(self) -> str:
        """URL base do store, sem credenciais."""
        return self._base_url

    def _credentials(self) -> Optional[Tuple[str, str]]:
        if self.user is not None:
            return self.user, self.password or ""
        if self._parsed.login is not None:
            return self._parsed.login, self._parsed.password or ""
        return None

    def _headers(self) -> Dict[str, str]:
        headers = {}
        credentials = self._credentials()
        if credentials is not None:
            token = base64.b64encode(":".join(credentials).encode()).decode()
            headers["Authorization"] = f"Basic {token}"
        return headers

    def _track_index(self, response: StoreResponse) -> None:
        raw = response.headers.get(STORE_INDEX_HEADER.lower())
        if raw is None:
            return
        try:
            index = int(raw)
        except ValueError:
            self.logger.debug(f"{STORE_INDEX_HEADER} inválido: {raw!r}")
            return
        response.index = index
        self.index = max(self.index, index)
        self.logger.debug(f"{STORE_INDEX_HEADER}: {self.index}")

    async def request(self, method: str, query: str,
                      timeout: Optional[float] = None) -> StoreResponse:
        """
        Executa uma requisição contra o espaço de chaves.

        Args:
            method: Método HTTP
            query: Chave com a query string já montada
            timeout: Timeout em segundos (None usa o padrão do cliente)

        Returns:
            StoreResponse: Resposta do store ou resposta sintética (595/599)
        """
        url = join_uri(self._base_url, STORE_KEYS_PREFIX, query)
        if timeout is None:
            timeout = self.timeout

        self.logger.debug(f"{method} {url} (timeout={timeout})")

        start_time = time.time()
        try:
            r = await self.http.request(method, url, headers=self._headers(), timeout=timeout)
        except httpx.TimeoutException as e:
            response = StoreResponse(status=TRANSPORT_TIMEOUT_STATUS, reason=_describe(e))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            response = StoreResponse(status=TRANSPORT_ERROR_STATUS, reason=_describe(e))
        else:
            response = StoreResponse(
                status=r.status_code,
                body=r.text,
                reason=r.reason_phrase,
                headers={k.lower(): v for k, v in r.headers.items()},
            )
            self._track_index(response)
        finally:
            store_metrics["request_duration"].labels(method=method).observe(time.time() - start_time)

        if has_error(response):
            outcome = "transport_error" if response.is_transport_error else "error"
            self.logger.debug(f"{method} {url} (timeout={timeout}): {error_message(response)}")
        else:
            outcome = "success"
            self.logger.debug(f"{method} {url} (timeout={timeout}): success")
        store_metrics["requests_total"].labels(method=method, outcome=outcome).inc()

        return response

    async def get(self, key: str, opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """
        Lê uma chave.

        Args:
            key: Caminho da chave
            opts: Opções (recursive, sort, timeout)

        Returns:
            StoreResponse: Resposta do store
        """
        options = resolve_options(opts, **kwargs)

        url = key
        if options.recursive:
            url = add_param(url, "recursive", "true")
        if options.sort:
            url = add_param(url, "sorted", "true")

        return await self.request("GET", url, options.timeout)

    async def set(self, key: str, value: Any, opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """
        Grava uma chave incondicionalmente.

        Args:
            key: Caminho da chave (pode já conter parâmetros de query)
            value: Valor a gravar; None omite o parâmetro value
            opts: Opções (ttl, timeout)

        Returns:
            StoreResponse: Resposta do store
        """
        options = resolve_options(opts, **kwargs)

        url = key
        if value is not None:
            url = add_param(url, "value", value)
        if options.ttl is not None:
            url = add_param(url, "ttl", _number(options.ttl))

        return await self.request("PUT", url, options.timeout)

    async def create(self, key: str, value: Any, opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """Grava a chave apenas se ela ainda não existir."""
        return await self.set(add_param(key, "prevExist", "false"), value, opts, **kwargs)

    async def update(self, key: str, value: Any, opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """Grava a chave apenas se ela já existir."""
        return await self.set(add_param(key, "prevExist", "true"), value, opts, **kwargs)

    async def refresh(self, key: str, opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """Renova o TTL de uma chave existente sem alterar o valor."""
        url = add_param(add_param(key, "prevExist", "true"), "refresh", "true")
        return await self.set(url, None, opts, **kwargs)

    async def compare_and_swap(self, key: str, old_value: Any, new_value: Any,
                               opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """Grava new_value apenas se a chave existir com o valor old_value."""
        url = add_param(add_param(key, "prevValue", old_value), "prevExist", "true")
        return await self.set(url, new_value, opts, **kwargs)

    cas = compare_and_swap

    async def wait(self, key: str, opts: OptionsArg = None, **kwargs: Any) -> StoreResponse:
        """
        Aguarda (long-poll) a próxima alteração da chave após o último índice visto.

        Faz uma única requisição; timeout volta como resposta 599 comum.
        """
        url = add_param(add_param(key, "wait", "true"), "waitIndex", self.index + 1)
        return await self.get(url, opts, **kwargs)

    def announce(self, key: str, value: Any, lock_store, opts=None, **kwargs):
        """
        Inicia o announce da chave usando um clone deste cliente.

        Ver announcer.announce.
        """
        from announcer.announcer import announce
        return announce(self, key, value, lock_store, opts, **kwargs)
