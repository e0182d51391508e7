from dataclasses import dataclass, field
from threading import Thread
from typing import override

from stockfighter._core.transport import (
    HttpTransport,
    Request,
    TransportDelegate,
    TransportTask,
    task_ids,
)
from stockfighter.exceptions import TransportError
from stockfighter.integrations import _is_installed

__all__ = ("HttpxTransport",)

if _is_installed("httpx", __name__):
    import httpx


class HttpxTransport(HttpTransport):
    """
    HTTP transport running each request on its own daemon thread with a shared
    `httpx.Client`.
    """

    __slots__ = ("__client",)

    __client: httpx.Client

    def __init__(self, client: httpx.Client | None = None, timeout: float = 20.0) -> None:
        self.__client = client or httpx.Client(timeout=timeout)

    @property
    def client(self) -> httpx.Client:
        return self.__client

    @override
    def prepare(self, request: Request, delegate: TransportDelegate) -> TransportTask:
        return HttpxTask(self.__client, request, delegate)

    def close(self) -> None:
        self.__client.close()


@dataclass(repr=False, eq=False, slots=True)
class HttpxTask(TransportTask):
    client: httpx.Client
    request: Request
    delegate: TransportDelegate
    __id: int = field(default_factory=task_ids.next, init=False)
    __is_cancelled: bool = field(default=False, init=False)
    __thread: Thread | None = field(default=None, init=False)

    @property
    @override
    def id(self) -> int:
        return self.__id

    @property
    def is_cancelled(self) -> bool:
        return self.__is_cancelled

    @override
    def resume(self) -> None:
        if self.__thread is not None:
            return

        self.__thread = Thread(
            target=self.__run,
            name=f"stockfighter-http-{self.__id}",
            daemon=True,
        )
        self.__thread.start()

    @override
    def cancel(self) -> None:
        self.__is_cancelled = True

    def join(self, timeout: float | None = None) -> None:
        if self.__thread is not None:
            self.__thread.join(timeout)

    def __run(self) -> None:
        request = self.request

        try:
            response = self.client.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
        except Exception as exc:
            self.__complete(None, TransportError(exc))
            return

        if response.content and not self.__is_cancelled:
            self.delegate.on_body_received(self.__id, response.content)

        self.__complete(response.status_code, None)

    def __complete(self, status: int | None, error: BaseException | None) -> None:
        if self.__is_cancelled:
            return

        self.delegate.on_completed(self.__id, status, error)
