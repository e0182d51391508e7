from threading import Event

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidURI

from stockfighter import Completed, Next, WebSocketClient
from stockfighter.exceptions import TransportError
from stockfighter.integrations import default_socket_transport
from stockfighter.integrations.websockets import WebsocketsHandle, WebsocketsTransport

URL = "wss://api.stockfighter.io/ob/api/ws/account/venues/TESTEX/executions"


class FakeConnection:
    def __init__(self, *messages, error=None, gate=None):
        self.messages = messages
        self.error = error
        self.gate = gate
        self.close_calls = 0

    def __iter__(self):
        yield from self.messages

        if self.gate is not None:
            self.gate.wait(5.0)

        if self.error is not None:
            raise self.error

    def close(self):
        self.close_calls += 1


class RecordingDelegate:
    def __init__(self):
        self.messages = []
        self.errors = []
        self.closed = Event()

    def on_message(self, handle, message, /):
        self.messages.append(message)

    def on_closed(self, handle, error, /):
        self.errors.append(error)
        self.closed.set()


class TestWebsocketsTransport:
    def test_open_with_success(self):
        urls = []
        connection = FakeConnection('{"ok": true}', "[]")

        def connect(url):
            urls.append(url)
            return connection

        delegate = RecordingDelegate()
        handle = WebsocketsTransport(connect).open(URL, delegate)

        assert isinstance(handle, WebsocketsHandle)
        assert delegate.closed.wait(5.0)
        assert urls == [URL]
        assert handle.url == URL
        assert delegate.messages == ['{"ok": true}', "[]"]
        assert delegate.errors == [None]

    def test_open_with_connection_closed_error_report_transport_error(self):
        closed = ConnectionClosedError(None, None)
        connection = FakeConnection("1", error=closed)
        delegate = RecordingDelegate()

        WebsocketsTransport(lambda url: connection).open(URL, delegate)

        assert delegate.closed.wait(5.0)
        error, = delegate.errors
        assert isinstance(error, TransportError)
        assert error.cause is closed

    @pytest.mark.parametrize("exc", [ConnectionRefusedError(), InvalidURI("ws:", "invalid")])
    def test_open_with_connect_failure_raise_transport_error(self, exc):
        def connect(url):
            raise exc

        with pytest.raises(TransportError) as info:
            WebsocketsTransport(connect).open(URL, RecordingDelegate())

        assert info.value.cause is exc

    def test_default_socket_transport_with_success(self):
        assert isinstance(default_socket_transport(), WebsocketsTransport)


class TestWebsocketsHandle:
    def test_close_with_success(self):
        gate = Event()
        connection = FakeConnection(error=ConnectionClosedError(None, None), gate=gate)
        delegate = RecordingDelegate()
        handle = WebsocketsTransport(lambda url: connection).open(URL, delegate)

        handle.close()
        handle.close()
        gate.set()
        handle.join(5.0)
        assert handle.is_closed
        assert connection.close_calls == 1
        assert delegate.errors == [None]


class TestWebSocketClientWithWebsockets:
    def test_messages_with_success(self, history):
        connection = FakeConnection('{"ok": true}', "not json", '{"ok": false}')
        transport = WebsocketsTransport(lambda url: connection)

        client = WebSocketClient(URL, transport, history)
        assert history.wait()
        assert list(history) == [Next({"ok": True}), Next({"ok": False}), Completed()]
        assert client.is_closed
