from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from threading import RLock
from typing import Any, NoReturn, Protocol, Self, override, runtime_checkable

from stockfighter._core.common.threading import AtomicCounter, synchronized
from stockfighter.exceptions import ContractViolation, UnobservedError

"""
Notifications
"""


class Notification[T](ABC):
    __slots__ = ()

    @abstractmethod
    def accept(self, observer: ObserverType[T]) -> None:
        raise NotImplementedError

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Next[T](Notification[T]):
    value: T

    @override
    def accept(self, observer: ObserverType[T]) -> None:
        observer.on_next(self.value)

    @property
    @override
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Error[T](Notification[T]):
    cause: BaseException

    @override
    def accept(self, observer: ObserverType[T]) -> None:
        observer.on_error(self.cause)


@dataclass(frozen=True, slots=True)
class Completed[T](Notification[T]):
    @override
    def accept(self, observer: ObserverType[T]) -> None:
        observer.on_completed()


"""
Observers
"""


@runtime_checkable
class ObserverType[T](Protocol):
    __slots__ = ()

    @abstractmethod
    def on_next(self, value: T, /) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_error(self, error: BaseException, /) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_completed(self) -> None:
        raise NotImplementedError


class AnyObserver[T](ObserverType[T]):
    __slots__ = (
        "__id",
        "__is_stopped",
        "__lock",
        "__on_completed",
        "__on_error",
        "__on_next",
    )

    __id: int
    __is_stopped: bool
    __lock: RLock
    __on_next: Callable[[T], Any]
    __on_error: Callable[[BaseException], Any]
    __on_completed: Callable[[], Any]

    __counter = AtomicCounter()

    def __init__(
        self,
        on_next: Callable[[T], Any] | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
        on_completed: Callable[[], Any] | None = None,
    ) -> None:
        self.__id = self.__counter.next()
        self.__is_stopped = False
        self.__lock = RLock()
        self.__on_next = on_next or (lambda value: None)
        self.__on_error = on_error or self.__raise_unobserved
        self.__on_completed = on_completed or (lambda: None)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AnyObserver):
            return self.__id == other.__id

        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.__id,))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} #{self.__id}>"

    @property
    def id(self) -> int:
        return self.__id

    @property
    def is_stopped(self) -> bool:
        return self.__is_stopped

    @override
    def on_next(self, value: T, /) -> None:
        if self.__is_stopped:
            return

        try:
            self.__on_next(value)
        except (ContractViolation, UnobservedError):
            raise
        except Exception as exc:
            if self.__is_stopped:
                raise

            self.on_error(exc)

    @override
    def on_error(self, error: BaseException, /) -> None:
        if self.__stop():
            self.__on_error(error)

    @override
    def on_completed(self) -> None:
        if self.__stop():
            self.__on_completed()

    def __stop(self) -> bool:
        with synchronized(self.__lock):
            if self.__is_stopped:
                return False

            self.__is_stopped = True
            return True

    @classmethod
    def wrap(cls, observer: ObserverType[T]) -> Self:
        return cls(observer.on_next, observer.on_error, observer.on_completed)

    @staticmethod
    def __raise_unobserved(error: BaseException) -> NoReturn:
        raise UnobservedError(f"Unobserved error: {error!r}") from error
