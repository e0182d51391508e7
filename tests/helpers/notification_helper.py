from collections.abc import Iterator
from dataclasses import dataclass, field
from threading import Event, RLock
from typing import Any, Self

from stockfighter import Completed, Error, Next, Notification, ObserverType


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class NotificationHistory(ObserverType[Any]):
    __history: list[Notification[Any]] = field(default_factory=list, init=False)
    __lock: RLock = field(default_factory=RLock, init=False)
    __terminated: Event = field(default_factory=Event, init=False)

    def __iter__(self) -> Iterator[Notification[Any]]:
        with self.__lock:
            history = tuple(self.__history)

        return iter(history)

    def __len__(self) -> int:
        return len(self.__history)

    @property
    def values(self) -> list[Any]:
        return [notification.value for notification in self if isinstance(notification, Next)]

    @property
    def errors(self) -> list[BaseException]:
        return [notification.cause for notification in self if isinstance(notification, Error)]

    @property
    def completions(self) -> int:
        return sum(isinstance(notification, Completed) for notification in self)

    def assert_length(self, length: int):
        assert len(self) == length

    def clear(self) -> Self:
        self.__history.clear()
        return self

    def wait(self, timeout: float = 5.0) -> bool:
        return self.__terminated.wait(timeout)

    def on_next(self, value: Any, /) -> None:
        self.__append(Next(value))

    def on_error(self, error: BaseException, /) -> None:
        self.__append(Error(error))
        self.__terminated.set()

    def on_completed(self) -> None:
        self.__append(Completed())
        self.__terminated.set()

    def __append(self, notification: Notification[Any]) -> None:
        with self.__lock:
            self.__history.append(notification)
