import json
import logging
from threading import Event
from typing import Annotated, Any, NoReturn

from pydantic import ValidationError
from typer import Argument, Exit, Option, Typer, echo

from stockfighter._core.http import HttpClient
from stockfighter._core.observer import AnyObserver
from stockfighter._core.transport import SocketTransport
from stockfighter._core.websocket import WebSocketClient
from stockfighter.exceptions import StockFighterError
from stockfighter.integrations import default_http_transport, default_socket_transport
from stockfighter.integrations.httpx import HttpxTransport
from stockfighter.settings import Settings

__all__ = ("app", "main")

app = Typer(name="stockfighter", no_args_is_help=True)

GameMaster = Annotated[
    bool,
    Option("--gm", help="Send the request to the game master API."),
]


@app.callback()
def configure(
    verbose: Annotated[bool, Option("--verbose", "-v")] = False,
) -> None:
    """
    Raw access to the StockFighter API. The API key is read from
    `STOCKFIGHTER_API_KEY` or `STOCKFIGHTER_KEY_FILE`.
    """

    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@app.command()
def get(path: str, gm: GameMaster = False) -> None:
    _run(lambda client: client.get(path), gm)


@app.command()
def post(
    path: str,
    body: Annotated[str | None, Option(help="JSON request body.")] = None,
    gm: GameMaster = False,
) -> None:
    try:
        document = json.loads(body) if body is not None else None
    except ValueError as exc:
        echo(f"Invalid JSON body: {exc}", err=True)
        raise Exit(code=2) from exc

    _run(lambda client: client.post(path, document), gm)


@app.command()
def delete(path: str, gm: GameMaster = False) -> None:
    _run(lambda client: client.delete(path), gm)


@app.command()
def watch(
    path: Annotated[str, Argument(help="Path relative to the WebSocket base URL.")],
    limit: Annotated[int | None, Option(min=1, help="Stop after N messages.")] = None,
) -> None:
    settings = _load_settings()
    done = Event()
    errors: list[BaseException] = []
    count = 0

    def on_next(message: Any) -> None:
        nonlocal count

        if done.is_set():
            return

        echo(json.dumps(message))
        count += 1

        if limit is not None and count >= limit:
            done.set()

    def on_error(error: BaseException) -> None:
        errors.append(error)
        done.set()

    url = f"{settings.ws_url}{path.lstrip('/')}"
    observer = AnyObserver(on_next, on_error, done.set)

    try:
        client = WebSocketClient(url, make_socket_transport(), observer)
    except StockFighterError as exc:
        _fail(exc)

    try:
        done.wait()
    finally:
        client.close()

    if errors:
        _fail(errors[0])


def make_http_transport(settings: Settings) -> HttpxTransport:
    return default_http_transport(settings.timeout)


def make_socket_transport() -> SocketTransport:
    return default_socket_transport()


def main() -> None:
    app()


def _run(call: Any, gm: bool) -> None:
    settings = _load_settings()
    transport = make_http_transport(settings)

    if gm:
        client = HttpClient(settings.gm_url, settings.gm_headers, transport)
    else:
        client = HttpClient(settings.api_url, settings.api_headers, transport)

    try:
        document = call(client)
    except StockFighterError as exc:
        _fail(exc)
    finally:
        transport.close()

    echo(json.dumps(document, indent=2))


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except (StockFighterError, ValidationError) as exc:
        _fail(exc)


def _fail(error: BaseException) -> NoReturn:
    echo(f"Error: {error}", err=True)
    raise Exit(code=1)
