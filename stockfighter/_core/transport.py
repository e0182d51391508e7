from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from stockfighter._core.common.threading import AtomicCounter
from stockfighter.exceptions import ContractViolation, NoResponse, UnexpectedStatus

"""
HTTP
"""


@dataclass(frozen=True, slots=True)
class Request:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes | None = None


@runtime_checkable
class TransportDelegate(Protocol):
    __slots__ = ()

    @abstractmethod
    def on_body_received(self, task_id: int, body: bytes, /) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_completed(
        self,
        task_id: int,
        status: int | None,
        error: BaseException | None,
        /,
    ) -> None:
        raise NotImplementedError


@runtime_checkable
class TransportTask(Protocol):
    __slots__ = ()

    @property
    @abstractmethod
    def id(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def resume(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:
        raise NotImplementedError


@runtime_checkable
class HttpTransport(Protocol):
    __slots__ = ()

    @abstractmethod
    def prepare(self, request: Request, delegate: TransportDelegate) -> TransportTask:
        raise NotImplementedError


task_ids = AtomicCounter()


def resolve_payload(
    status: int | None,
    body: bytes | None,
    error: BaseException | None,
) -> bytes:
    if error is not None:
        raise error

    if status is None:
        raise ContractViolation("Request completed without status nor error.")

    if not 200 <= status < 300:
        raise UnexpectedStatus(status)

    if body is None:
        raise NoResponse("Request completed without response body.")

    return body


"""
WebSocket
"""


@runtime_checkable
class SocketHandle(Protocol):
    __slots__ = ()

    @property
    @abstractmethod
    def url(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError


@runtime_checkable
class SocketDelegate(Protocol):
    __slots__ = ()

    @abstractmethod
    def on_message(self, handle: SocketHandle, message: str | bytes, /) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_closed(self, handle: SocketHandle, error: BaseException | None, /) -> None:
        raise NotImplementedError


@runtime_checkable
class SocketTransport(Protocol):
    __slots__ = ()

    @abstractmethod
    def open(self, url: str, delegate: SocketDelegate) -> SocketHandle:
        raise NotImplementedError
