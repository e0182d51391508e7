from __future__ import annotations

from importlib.util import find_spec
from typing import TYPE_CHECKING, Literal

from stockfighter._core.transport import SocketTransport

if TYPE_CHECKING:
    from stockfighter.integrations.httpx import HttpxTransport

__all__ = ("_is_installed", "default_http_transport", "default_socket_transport")


def _is_installed(package: str, needed_for: object, /) -> Literal[True]:
    if find_spec(package) is None:
        raise RuntimeError(f"`{needed_for}` needs `{package}`: pip install {package}")

    return True


def default_http_transport(timeout: float = 20.0) -> HttpxTransport:
    from stockfighter.integrations.httpx import HttpxTransport

    return HttpxTransport(timeout=timeout)


def default_socket_transport() -> SocketTransport:
    from stockfighter.integrations.websockets import WebsocketsTransport

    return WebsocketsTransport()
