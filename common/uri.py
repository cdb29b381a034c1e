"""
Utilitários de URI usados pelo cliente do key/value store.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

_URI_RE = re.compile(r"((http|https)://)?([^/?#]*)([^#]*)(.*)", re.DOTALL)
_USERINFO_RE = re.compile(r"^([^@]+)@(.+)$")
_LOGIN_RE = re.compile(r"^([^:]+):(.*)$")
_PORT_RE = re.compile(r"^([^:]*):([0-9]+)$")


@dataclass
class ParsedUri:
    """Componentes de um endereço do tipo [scheme://][user[:pass]@]host[:port][/path][#anchor]."""
    uri: str
    scheme: Optional[str]
    login: Optional[str]
    password: Optional[str]
    host: str
    port: Optional[int]
    path: str
    anchor: str

    @property
    def netloc(self) -> str:
        """host[:port] sem credenciais."""
        if self.port is None:
            return self.host
        return f"{self.host}:{self.port}"

    def base_url(self, default_scheme: str = "http") -> str:
        """
        Reconstrói a URL base sem credenciais.

        Args:
            default_scheme: Esquema usado quando o endereço não traz um

        Returns:
            str: scheme://host[:port][path]
        """
        scheme = self.scheme or default_scheme
        path = self.path if self.path != "/" else ""
        return f"{scheme}://{self.netloc}{path}"


def parse_uri(text: str) -> Optional[ParsedUri]:
    """
    Decompõe um endereço em esquema, credenciais, host, porta, caminho e âncora.

    O caminho retornado sempre começa com "/".

    Args:
        text: Endereço a ser decomposto

    Returns:
        Optional[ParsedUri]: Componentes do endereço ou None se não for possível
    """
    if text is None:
        return None

    m = _URI_RE.match(text)
    if not m:
        return None

    scheme = m.group(2)
    host = m.group(3)
    path = m.group(4)
    anchor = m.group(5)
    if not path.startswith("/"):
        path = "/" + path

    login = password = None
    m = _USERINFO_RE.match(host)
    if m:
        login, host = m.group(1), m.group(2)

    if login:
        m = _LOGIN_RE.match(login)
        if m:
            login, password = m.group(1), m.group(2)

    port = None
    m = _PORT_RE.match(host)
    if m:
        host, port = m.group(1), int(m.group(2))

    return ParsedUri(
        uri=text,
        scheme=scheme,
        login=login,
        password=password,
        host=host,
        port=port,
        path=path,
        anchor=anchor,
    )


def escape_uri(value: Any) -> str:
    """Codifica em percent-encoding tudo que não for caractere não reservado."""
    return quote(str(value), safe="-_.~")


def add_param(uri: str, name: str, value: Any) -> str:
    """
    Adiciona um parâmetro de query a uma URI.

    Args:
        uri: URI (ou chave) de origem
        name: Nome do parâmetro
        value: Valor do parâmetro (convertido para string)

    Returns:
        str: URI com "?name=value" ou "&name=value" anexado
    """
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}{escape_uri(name)}={escape_uri(value)}"


def join_uri(*parts: str) -> str:
    """
    Concatena segmentos garantindo exatamente uma "/" entre eles.

    Exemplo: join_uri("http://host", "/v2/keys", "a/b") -> "http://host/v2/keys/a/b"
    """
    url = ""
    for part in parts:
        if not url:
            url = part
        elif part.startswith("/"):
            url = url + part[1:] if url.endswith("/") else url + part
        else:
            url = url + part if url.endswith("/") else url + "/" + part
    return url
