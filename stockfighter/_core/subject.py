from threading import RLock
from typing import override

from stockfighter._core.common.threading import synchronized
from stockfighter._core.disposable import AnonymousDisposable, Disposable
from stockfighter._core.observable import Observable
from stockfighter._core.observer import (
    AnyObserver,
    Completed,
    Error,
    Notification,
    ObserverType,
)


class Subject[T](Observable[T], ObserverType[T]):
    __slots__ = ("__lock", "__observers", "__terminal")

    __lock: RLock
    __observers: set[AnyObserver[T]]
    __terminal: Notification[T] | None

    def __init__(self) -> None:
        super().__init__(self.__add)
        self.__lock = RLock()
        self.__observers = set()
        self.__terminal = None

    def __len__(self) -> int:
        return len(self.__observers)

    @property
    def observers(self) -> tuple[AnyObserver[T], ...]:
        with synchronized(self.__lock):
            return tuple(self.__observers)

    @property
    def is_stopped(self) -> bool:
        return self.__terminal is not None

    @override
    def on_next(self, value: T, /) -> None:
        if self.__terminal is not None:
            return

        for observer in self.observers:
            observer.on_next(value)

    @override
    def on_error(self, error: BaseException, /) -> None:
        self.__stop(Error(error))

    @override
    def on_completed(self) -> None:
        self.__stop(Completed())

    def __stop(self, terminal: Notification[T]) -> None:
        with synchronized(self.__lock):
            if self.__terminal is not None:
                return

            self.__terminal = terminal
            observers = tuple(self.__observers)
            self.__observers.clear()

        for observer in observers:
            terminal.accept(observer)

    def __add(self, observer: AnyObserver[T]) -> Disposable:
        with synchronized(self.__lock):
            terminal = self.__terminal

            if terminal is None:
                self.__observers.add(observer)

        if terminal is not None:
            # Late subscribers get the terminal notification replayed.
            terminal.accept(observer)
            return AnonymousDisposable()

        return AnonymousDisposable(lambda: self.__remove(observer))

    def __remove(self, observer: AnyObserver[T]) -> None:
        with synchronized(self.__lock):
            self.__observers.discard(observer)
