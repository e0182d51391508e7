import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Any, Self, override
from urllib.parse import urljoin

from stockfighter._core.bridge import BlockingBridge
from stockfighter._core.common.threading import synchronized
from stockfighter._core.disposable import AnonymousDisposable, Disposable
from stockfighter._core.observable import Observable
from stockfighter._core.observer import AnyObserver
from stockfighter._core.transport import (
    HttpTransport,
    Request,
    TransportDelegate,
    resolve_payload,
)
from stockfighter.exceptions import ContractViolation, PayloadError
from stockfighter.integrations import default_http_transport

type JSON = Any


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class RequestBuilder:
    base_url: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def build(self, method: str, path: str, body: JSON | None = None) -> Request:
        headers = dict(self.headers)
        content = None

        if body is not None:
            content = json.dumps(body).encode()
            headers["Content-Type"] = "application/json"

        return Request(
            method=method,
            url=urljoin(self.base_url, path.lstrip("/")),
            headers=MappingProxyType(headers),
            body=content,
        )


def decode_json(payload: bytes) -> JSON:
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise PayloadError(f"Response body isn't valid JSON: {exc}") from exc


"""
Blocking client
"""


class HttpClient:
    """
    Low level blocking HTTP client. Each call blocks the calling thread until the
    transport reports the request as completed.
    """

    __slots__ = ("__bridge", "__builder", "__close")

    __bridge: BlockingBridge
    __builder: RequestBuilder
    __close: Callable[[], None]

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        transport, self.__close = _resolve_transport(transport)
        self.__bridge = BlockingBridge(transport)
        self.__builder = RequestBuilder(base_url, MappingProxyType(dict(headers or {})))

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def bridge(self) -> BlockingBridge:
        return self.__bridge

    def get(self, path: str) -> JSON:
        return self.__send(self.__builder.build("GET", path))

    def post(self, path: str, body: JSON | None = None) -> JSON:
        return self.__send(self.__builder.build("POST", path, body))

    def delete(self, path: str) -> JSON:
        return self.__send(self.__builder.build("DELETE", path))

    def close(self) -> None:
        """
        Close the default transport. A transport passed by the caller is left open.
        """

        self.__close()

    def __send(self, request: Request) -> JSON:
        payload = self.__bridge.perform(request)
        return decode_json(payload)


"""
Observable client
"""


class AsyncHttpClient:
    """
    Low level HTTP client returning cold observables. Every subscription sends
    a new request; disposing it cancels the request.
    """

    __slots__ = ("__builder", "__close", "__transport")

    __builder: RequestBuilder
    __close: Callable[[], None]
    __transport: HttpTransport

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        self.__builder = RequestBuilder(base_url, MappingProxyType(dict(headers or {})))
        self.__transport, self.__close = _resolve_transport(transport)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def get(self, path: str) -> Observable[JSON]:
        return self.__send(self.__builder.build("GET", path))

    def post(self, path: str, body: JSON | None = None) -> Observable[JSON]:
        try:
            request = self.__builder.build("POST", path, body)
        except (TypeError, ValueError) as exc:
            return Observable.error(exc)

        return self.__send(request)

    def delete(self, path: str) -> Observable[JSON]:
        return self.__send(self.__builder.build("DELETE", path))

    def close(self) -> None:
        self.__close()

    def __send(self, request: Request) -> Observable[JSON]:
        transport = self.__transport

        def subscribe(observer: AnyObserver[JSON]) -> Disposable:
            task = transport.prepare(request, _ObserverDelegate(observer))
            task.resume()
            return AnonymousDisposable(task.cancel)

        return Observable(subscribe)


class _ObserverDelegate(TransportDelegate):
    __slots__ = ("__body", "__lock", "__observer")

    __body: bytes | None
    __lock: RLock
    __observer: AnyObserver[JSON]

    def __init__(self, observer: AnyObserver[JSON]) -> None:
        self.__body = None
        self.__lock = RLock()
        self.__observer = observer

    @override
    def on_body_received(self, task_id: int, body: bytes, /) -> None:
        with synchronized(self.__lock):
            if self.__body is not None:
                raise ContractViolation(
                    f"Request #{task_id} received its response body twice."
                )

            self.__body = body

    @override
    def on_completed(
        self,
        task_id: int,
        status: int | None,
        error: BaseException | None,
        /,
    ) -> None:
        with synchronized(self.__lock):
            body = self.__body

        try:
            document = decode_json(resolve_payload(status, body, error))
        except ContractViolation:
            raise
        except Exception as exc:
            self.__observer.on_error(exc)
            return

        self.__observer.on_next(document)
        self.__observer.on_completed()


def _resolve_transport(
    transport: HttpTransport | None,
) -> tuple[HttpTransport, Callable[[], None]]:
    if transport is not None:
        return transport, lambda: None

    owned = default_http_transport()
    return owned, owned.close
