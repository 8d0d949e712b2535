from enum import Enum
from typing import Mapping
from types import MappingProxyType
from dataclasses import dataclass, field


class HttpMethod(Enum):
    # HttpMethod {{{
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    HEAD = "HEAD"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    # }}}


class Dialect(Enum):
    # Dialect {{{
    Bash = "bash"
    WindowsCmd = "cmd"
    # }}}


class ParseErrorKind(Enum):
    # ParseErrorKind {{{
    MissingUrl = "MissingUrl"
    # }}}


@dataclass(frozen=True)
class ParsedRequest():
    # ParsedRequest {{{
    url: str
    method: HttpMethod = HttpMethod.GET
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    # Headers are a mapping, so requests compare but do not hash
    __hash__ = None

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(self, "headers",
                           MappingProxyType(dict(self.headers)))

    def to_dict(self) -> dict:
        """
        Plain copy of the request, safe for callers to edit
        """
        return {
            "method": self.method.value,
            "url": self.url,
            "headers": dict(self.headers),
            "body": self.body,
        }

    def __str__(self) -> str:
        metadata = f"{self.method.value} {self.url}\n"
        headers = "".join(f"{key}: {value}\n"
                          for key, value in self.headers.items())
        body = f"{self.body}\n" if self.body != "" else ""
        return metadata + headers + body
    # }}}


@dataclass(frozen=True)
class ParseError():
    # ParseError {{{
    kind: ParseErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
    # }}}
