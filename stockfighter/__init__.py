from ._core.bridge import BlockingBridge
from ._core.disposable import (
    AnonymousDisposable,
    CompositeDisposable,
    Disposable,
    SerialDisposable,
)
from ._core.http import AsyncHttpClient, HttpClient
from ._core.observable import Observable, ObservableType
from ._core.observer import (
    AnyObserver,
    Completed,
    Error,
    Next,
    Notification,
    ObserverType,
)
from ._core.subject import Subject
from ._core.transport import (
    HttpTransport,
    Request,
    SocketDelegate,
    SocketHandle,
    SocketTransport,
    TransportDelegate,
    TransportTask,
)
from ._core.websocket import WebSocketClient

__all__ = (
    "AnonymousDisposable",
    "AnyObserver",
    "AsyncHttpClient",
    "BlockingBridge",
    "Completed",
    "CompositeDisposable",
    "Disposable",
    "Error",
    "HttpClient",
    "HttpTransport",
    "Next",
    "Notification",
    "Observable",
    "ObservableType",
    "ObserverType",
    "Request",
    "SerialDisposable",
    "SocketDelegate",
    "SocketHandle",
    "SocketTransport",
    "Subject",
    "TransportDelegate",
    "TransportTask",
    "WebSocketClient",
)
