from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable
from typing import Any, Protocol, override, runtime_checkable

from stockfighter._core.disposable import AnonymousDisposable, Disposable
from stockfighter._core.observer import AnyObserver, ObserverType

type SubscribeFunction[T] = Callable[[AnyObserver[T]], Disposable]


@runtime_checkable
class ObservableType[T](Protocol):
    __slots__ = ()

    @abstractmethod
    def subscribe(self, observer: ObserverType[T], /) -> Disposable:
        raise NotImplementedError


class Observable[T](ObservableType[T]):
    __slots__ = ("__subscribe",)

    __subscribe: SubscribeFunction[T]

    def __init__(self, subscribe: SubscribeFunction[T]) -> None:
        self.__subscribe = subscribe

    @override
    def subscribe(
        self,
        on_next: ObserverType[T] | Callable[[T], Any] | None = None,
        /,
        on_error: Callable[[BaseException], Any] | None = None,
        on_completed: Callable[[], Any] | None = None,
    ) -> Disposable:
        if isinstance(on_next, ObserverType):
            observer = AnyObserver.wrap(on_next)
        else:
            observer = AnyObserver(on_next, on_error, on_completed)

        return self.__subscribe(observer)

    def map[R](self, transform: Callable[[T], R]) -> Observable[R]:
        from stockfighter._core import operators

        return operators.map(self, transform)

    def filter(self, predicate: Callable[[T], bool]) -> Observable[T]:
        from stockfighter._core import operators

        return operators.filter(self, predicate)

    def flat_map[R](
        self,
        selector: Callable[[T], ObservableType[R]],
    ) -> Observable[R]:
        from stockfighter._core import operators

        return operators.flat_map(self, selector)

    @staticmethod
    def create[V](subscribe: SubscribeFunction[V]) -> Observable[V]:
        return Observable(subscribe)

    @staticmethod
    def wrap[V](observable: ObservableType[V]) -> Observable[V]:
        if isinstance(observable, Observable):
            return observable

        return Observable(observable.subscribe)

    @staticmethod
    def error(error: BaseException) -> Observable[Any]:
        def subscribe(observer: AnyObserver[Any]) -> Disposable:
            observer.on_error(error)
            return AnonymousDisposable()

        return Observable(subscribe)

    @staticmethod
    def empty() -> Observable[Any]:
        def subscribe(observer: AnyObserver[Any]) -> Disposable:
            observer.on_completed()
            return AnonymousDisposable()

        return Observable(subscribe)

    @staticmethod
    def just[V](value: V) -> Observable[V]:
        def subscribe(observer: AnyObserver[V]) -> Disposable:
            observer.on_next(value)
            observer.on_completed()
            return AnonymousDisposable()

        return Observable(subscribe)
