"""
Módulo de comunicação HTTP compartilhado.
Fornece o transporte usado pelo cliente do key/value store.
"""
import logging
from typing import Dict, Optional
import httpx

logger = logging.getLogger("communication")

class HttpClient:
    """
    Cliente HTTP assíncrono de baixo nível.

    Características:
    1. Suporte a timeouts configuráveis por requisição
    2. Gerenciamento de conexões keep-alive
    3. Não interpreta o status: a resposta é devolvida como recebida
    """

    def __init__(self, timeout: float = 30.0, max_connections: int = 100,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Inicializa o cliente HTTP.

        Args:
            timeout: Timeout padrão para requisições em segundos
            max_connections: Número máximo de conexões concorrentes
            transport: Transporte httpx alternativo (ex.: httpx.MockTransport)
        """
        self.timeout = timeout
        self.limits = httpx.Limits(max_connections=max_connections)
        self.transport = transport
        self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """
        Obtém o cliente HTTP assíncrono, criando-o se necessário.

        Returns:
            httpx.AsyncClient: Cliente HTTP assíncrono
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=self.limits,
                transport=self.transport,
                follow_redirects=True
            )
        return self._client

    async def close(self):
        """Fecha o cliente HTTP."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, url: str,
                      headers: Optional[Dict[str, str]] = None,
                      timeout: Optional[float] = None) -> httpx.Response:
        """
        Faz uma requisição HTTP.

        Args:
            method: Método HTTP (GET, PUT, ...)
            url: URL completa, incluindo a query string
            headers: Cabeçalhos HTTP
            timeout: Timeout para esta requisição específica (sobrescreve o padrão)

        Returns:
            httpx.Response: Resposta recebida, qualquer que seja o status

        Raises:
            httpx.HTTPError: Se nenhuma resposta for obtida (conexão, timeout)
        """
        if timeout is None:
            timeout = self.timeout
        return await self.client.request(
            method,
            url,
            headers=headers,
            timeout=timeout
        )
