from dataclasses import dataclass, field
from logging import Logger, getLogger
from threading import Event, RLock
from typing import Self, override

from stockfighter._core.common.threading import synchronized
from stockfighter._core.transport import (
    HttpTransport,
    Request,
    TransportDelegate,
    resolve_payload,
)
from stockfighter.exceptions import ContractViolation


@dataclass(repr=False, eq=False, slots=True)
class PendingRequest:
    signal: Event = field(default_factory=Event, init=False)
    body: bytes | None = field(default=None, init=False)
    status: int | None = field(default=None, init=False)
    error: BaseException | None = field(default=None, init=False)

    def resolve(self) -> bytes:
        return resolve_payload(self.status, self.body, self.error)


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class BlockingBridge(TransportDelegate):
    transport: HttpTransport
    __pending: dict[int, PendingRequest] = field(default_factory=dict, init=False)
    __lock: RLock = field(default_factory=RLock, init=False)
    __loggers: list[Logger] = field(
        default_factory=lambda: [getLogger("stockfighter")],
        init=False,
    )

    def __len__(self) -> int:
        return len(self.__pending)

    def perform(self, request: Request) -> bytes:
        task = self.transport.prepare(request, self)
        task_id = task.id
        record = PendingRequest()

        with synchronized(self.__lock):
            if task_id in self.__pending:
                raise ContractViolation(f"Request #{task_id} is already pending.")

            self.__pending[task_id] = record

        self.__debug(f"Request #{task_id} started: {request.method} {request.url}")

        try:
            task.resume()
            record.signal.wait()
        except BaseException:
            with synchronized(self.__lock):
                self.__pending.pop(task_id, None)

            task.cancel()
            raise

        with synchronized(self.__lock):
            try:
                record = self.__pending.pop(task_id)
            except KeyError as exc:
                raise ContractViolation(
                    f"Request #{task_id} vanished before being read."
                ) from exc

        self.__debug(f"Request #{task_id} completed with status `{record.status}`.")
        return record.resolve()

    @override
    def on_body_received(self, task_id: int, body: bytes, /) -> None:
        with synchronized(self.__lock):
            record = self.__find(task_id)

            if record.body is not None:
                raise ContractViolation(
                    f"Request #{task_id} received its response body twice."
                )

            record.body = body

    @override
    def on_completed(
        self,
        task_id: int,
        status: int | None,
        error: BaseException | None,
        /,
    ) -> None:
        with synchronized(self.__lock):
            record = self.__find(task_id)

            if record.signal.is_set():
                raise ContractViolation(f"Request #{task_id} completed twice.")

            record.status = status
            record.error = error
            record.signal.set()

    def add_logger(self, logger: Logger) -> Self:
        self.__loggers.append(logger)
        return self

    def __find(self, task_id: int) -> PendingRequest:
        try:
            return self.__pending[task_id]
        except KeyError as exc:
            raise ContractViolation(f"No pending request #{task_id}.") from exc

    def __debug(self, message: object) -> None:
        for logger in tuple(self.__loggers):
            logger.debug(message)
