from __future__ import annotations

import json
from collections.abc import Callable
from logging import Logger, getLogger
from threading import RLock
from typing import Any, Self, override

from stockfighter._core.common.threading import synchronized
from stockfighter._core.disposable import AnonymousDisposable, Disposable
from stockfighter._core.observable import Observable
from stockfighter._core.observer import AnyObserver, ObserverType
from stockfighter._core.subject import Subject
from stockfighter._core.transport import SocketDelegate, SocketHandle, SocketTransport
from stockfighter.exceptions import StockFighterError
from stockfighter.integrations import default_socket_transport

type JSON = Any


class WebSocketClient(SocketDelegate):
    """
    Thin wrapper over a socket transport. The socket is opened on construction and
    every JSON text message is relayed to the subscribers of `messages`.
    """

    __slots__ = (
        "__handle",
        "__is_closed",
        "__lock",
        "__loggers",
        "__subject",
        "__subscription",
        "url",
    )

    __handle: SocketHandle | None
    __is_closed: bool
    __lock: RLock
    __loggers: list[Logger]
    __subject: Subject[JSON]
    __subscription: Disposable | None

    url: str

    def __init__(
        self,
        url: str,
        transport: SocketTransport | None = None,
        callback: ObserverType[JSON] | Callable[[JSON], Any] | None = None,
    ) -> None:
        self.url = url
        self.__handle = None
        self.__is_closed = False
        self.__lock = RLock()
        self.__loggers = [getLogger("stockfighter")]
        self.__subject = Subject()

        if callback is None:
            self.__subscription = None
        elif isinstance(callback, ObserverType):
            self.__subscription = self.__subject.subscribe(callback)
        else:
            self.__subscription = self.__subject.subscribe(callback, self.__log_error)

        transport = transport or default_socket_transport()
        handle = transport.open(url, self)

        with synchronized(self.__lock):
            self.__handle = handle
            is_closed = self.__is_closed

        if is_closed:
            handle.close()

        self.__debug(f"WebSocket opened: {url}")

    @property
    def messages(self) -> Observable[JSON]:
        return self.__subject

    @property
    def is_closed(self) -> bool:
        return self.__is_closed

    def close(self) -> None:
        if not self.__mark_closed():
            return

        with synchronized(self.__lock):
            handle = self.__handle

        if handle is not None:
            handle.close()

        self.__debug(f"WebSocket closed: {self.url}")
        self.__subject.on_completed()

    def add_logger(self, logger: Logger) -> Self:
        self.__loggers.append(logger)
        return self

    @override
    def on_message(self, handle: SocketHandle, message: str | bytes, /) -> None:
        if self.__is_closed:
            return

        if not isinstance(message, str):
            self.__warning(f"WebSocket `{self.url}` ignoring non-text message.")
            return

        try:
            document = json.loads(message)
        except ValueError as exc:
            self.__warning(f"WebSocket `{self.url}` ignoring invalid JSON: {exc}")
            return

        self.__subject.on_next(document)

    @override
    def on_closed(self, handle: SocketHandle, error: BaseException | None, /) -> None:
        if not self.__mark_closed():
            return

        if error is None:
            self.__debug(f"WebSocket closed by peer: {self.url}")
            self.__subject.on_completed()
        else:
            self.__debug(f"WebSocket failed: {self.url} ({error!r})")
            self.__subject.on_error(error)

    @classmethod
    def observe(cls, url: str, transport: SocketTransport | None = None) -> Observable[JSON]:
        def subscribe(observer: AnyObserver[JSON]) -> Disposable:
            try:
                client = cls(url, transport, observer)
            except StockFighterError as exc:
                observer.on_error(exc)
                return AnonymousDisposable()

            def dispose() -> None:
                if client.__subscription is not None:
                    client.__subscription.dispose()

                client.close()

            return AnonymousDisposable(dispose)

        return Observable(subscribe)

    def __mark_closed(self) -> bool:
        with synchronized(self.__lock):
            if self.__is_closed:
                return False

            self.__is_closed = True
            return True

    def __log_error(self, error: BaseException) -> None:
        for logger in tuple(self.__loggers):
            logger.error(f"Error on WebSocket `{self.url}`: {error!r}")

    def __debug(self, message: object) -> None:
        for logger in tuple(self.__loggers):
            logger.debug(message)

    def __warning(self, message: object) -> None:
        for logger in tuple(self.__loggers):
            logger.warning(message)
