from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Thread
from typing import Any, override

from stockfighter._core.transport import SocketDelegate, SocketHandle, SocketTransport
from stockfighter.exceptions import TransportError
from stockfighter.integrations import _is_installed

__all__ = ("WebsocketsTransport",)

if _is_installed("websockets", __name__):
    from websockets.exceptions import ConnectionClosedError, WebSocketException
    from websockets.sync.client import ClientConnection, connect


type Connect = Callable[[str], ClientConnection]


class WebsocketsTransport(SocketTransport):
    """
    Socket transport reading each connection on its own daemon thread with the
    synchronous `websockets` client.
    """

    __slots__ = ("__connect",)

    __connect: Connect

    def __init__(self, connect: Connect = connect) -> None:
        self.__connect = connect

    @override
    def open(self, url: str, delegate: SocketDelegate) -> SocketHandle:
        try:
            connection = self.__connect(url)
        except (OSError, WebSocketException) as exc:
            raise TransportError(exc) from exc

        handle = WebsocketsHandle(url, connection, delegate)
        handle.start()
        return handle


@dataclass(repr=False, eq=False, slots=True)
class WebsocketsHandle(SocketHandle):
    __url: str
    connection: Any
    delegate: SocketDelegate
    __is_closed: bool = field(default=False, init=False)
    __thread: Thread | None = field(default=None, init=False)

    @property
    @override
    def url(self) -> str:
        return self.__url

    @property
    def is_closed(self) -> bool:
        return self.__is_closed

    def start(self) -> None:
        self.__thread = Thread(
            target=self.__run,
            name=f"stockfighter-ws-{self.__url}",
            daemon=True,
        )
        self.__thread.start()

    @override
    def close(self) -> None:
        if self.__is_closed:
            return

        self.__is_closed = True
        self.connection.close()

    def join(self, timeout: float | None = None) -> None:
        if self.__thread is not None:
            self.__thread.join(timeout)

    def __run(self) -> None:
        error = None

        try:
            for message in self.connection:
                if self.__is_closed:
                    break

                self.delegate.on_message(self, message)

        except ConnectionClosedError as exc:
            if not self.__is_closed:
                error = TransportError(exc)

        self.delegate.on_closed(self, error)
