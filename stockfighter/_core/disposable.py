from abc import abstractmethod
from collections.abc import Callable
from threading import RLock
from typing import Protocol, Self, override, runtime_checkable

from stockfighter._core.common.threading import synchronized


@runtime_checkable
class Disposable(Protocol):
    __slots__ = ()

    @abstractmethod
    def dispose(self) -> None:
        raise NotImplementedError


class AnonymousDisposable(Disposable):
    __slots__ = ("__action", "__lock")

    __action: Callable[[], None] | None
    __lock: RLock

    def __init__(self, action: Callable[[], None] | None = None) -> None:
        self.__action = action or (lambda: None)
        self.__lock = RLock()

    @property
    def is_disposed(self) -> bool:
        return self.__action is None

    @override
    def dispose(self) -> None:
        with synchronized(self.__lock):
            action, self.__action = self.__action, None

        if action is not None:
            action()


class CompositeDisposable(Disposable):
    __slots__ = ("__disposables", "__is_disposed", "__lock")

    __disposables: list[Disposable]
    __is_disposed: bool
    __lock: RLock

    def __init__(self, *disposables: Disposable) -> None:
        self.__disposables = list(disposables)
        self.__is_disposed = False
        self.__lock = RLock()

    def __len__(self) -> int:
        return len(self.__disposables)

    @property
    def is_disposed(self) -> bool:
        return self.__is_disposed

    def add(self, disposable: Disposable) -> Self:
        with synchronized(self.__lock):
            should_dispose = self.__is_disposed

            if not should_dispose:
                self.__disposables.append(disposable)

        if should_dispose:
            disposable.dispose()

        return self

    def remove(self, disposable: Disposable) -> bool:
        with synchronized(self.__lock):
            if self.__is_disposed:
                return False

            try:
                self.__disposables.remove(disposable)
            except ValueError:
                return False

        disposable.dispose()
        return True

    @override
    def dispose(self) -> None:
        with synchronized(self.__lock):
            if self.__is_disposed:
                return

            self.__is_disposed = True
            disposables = tuple(self.__disposables)
            self.__disposables.clear()

        for disposable in disposables:
            disposable.dispose()


class SerialDisposable(Disposable):
    __slots__ = ("__current", "__is_disposed", "__lock")

    __current: Disposable | None
    __is_disposed: bool
    __lock: RLock

    def __init__(self) -> None:
        self.__current = None
        self.__is_disposed = False
        self.__lock = RLock()

    @property
    def is_disposed(self) -> bool:
        return self.__is_disposed

    @property
    def disposable(self) -> Disposable | None:
        return self.__current

    @disposable.setter
    def disposable(self, value: Disposable | None) -> None:
        with synchronized(self.__lock):
            should_dispose = self.__is_disposed

            if should_dispose:
                previous = None
            else:
                previous, self.__current = self.__current, value

        if previous is not None:
            previous.dispose()

        if should_dispose and value is not None:
            value.dispose()

    @override
    def dispose(self) -> None:
        with synchronized(self.__lock):
            if self.__is_disposed:
                return

            self.__is_disposed = True
            current, self.__current = self.__current, None

        if current is not None:
            current.dispose()
