from collections.abc import Callable
from threading import RLock
from typing import Any

from stockfighter._core.common.threading import synchronized
from stockfighter._core.disposable import (
    CompositeDisposable,
    Disposable,
    SerialDisposable,
)
from stockfighter._core.observable import Observable, ObservableType
from stockfighter._core.observer import AnyObserver
from stockfighter.exceptions import OperatorError

__all__ = ("filter", "flat_map", "map")


def map[T, R](
    source: ObservableType[T],
    transform: Callable[[T], R],
) -> Observable[R]:
    def subscribe(observer: AnyObserver[R]) -> Disposable:
        upstream = SerialDisposable()

        def on_next(value: T) -> None:
            try:
                result = transform(value)
            except Exception as exc:
                upstream.dispose()
                observer.on_error(_operator_error(transform, exc))
                return

            observer.on_next(result)

        upstream.disposable = source.subscribe(
            AnyObserver(on_next, observer.on_error, observer.on_completed),
        )
        return upstream

    return Observable(subscribe)


def filter[T](
    source: ObservableType[T],
    predicate: Callable[[T], bool],
) -> Observable[T]:
    def subscribe(observer: AnyObserver[T]) -> Disposable:
        upstream = SerialDisposable()

        def on_next(value: T) -> None:
            try:
                is_kept = predicate(value)
            except Exception as exc:
                upstream.dispose()
                observer.on_error(_operator_error(predicate, exc))
                return

            if is_kept:
                observer.on_next(value)

        upstream.disposable = source.subscribe(
            AnyObserver(on_next, observer.on_error, observer.on_completed),
        )
        return upstream

    return Observable(subscribe)


def flat_map[T, R](
    source: ObservableType[T],
    selector: Callable[[T], ObservableType[R]],
) -> Observable[R]:
    def subscribe(observer: AnyObserver[R]) -> Disposable:
        group = CompositeDisposable()
        lock = RLock()
        active = 1
        is_stopped = False

        def fail(error: BaseException) -> None:
            nonlocal is_stopped

            with synchronized(lock):
                if is_stopped:
                    return

                is_stopped = True

            group.dispose()
            observer.on_error(error)

        def release() -> None:
            nonlocal active, is_stopped

            with synchronized(lock):
                if is_stopped:
                    return

                active -= 1

                if active > 0:
                    return

                is_stopped = True

            observer.on_completed()
            group.dispose()

        def forward(value: R) -> None:
            if not is_stopped:
                observer.on_next(value)

        def on_next(value: T) -> None:
            nonlocal active

            try:
                inner = selector(value)
            except Exception as exc:
                fail(_operator_error(selector, exc))
                return

            with synchronized(lock):
                if is_stopped:
                    return

                active += 1

            subscription = SerialDisposable()
            group.add(subscription)

            def on_inner_completed() -> None:
                group.remove(subscription)
                release()

            subscription.disposable = inner.subscribe(
                AnyObserver(forward, fail, on_inner_completed),
            )

        group.add(source.subscribe(AnyObserver(on_next, fail, release)))
        return group

    return Observable(subscribe)


def _operator_error(function: Callable[..., Any], exc: Exception) -> OperatorError:
    name = getattr(function, "__qualname__", repr(function))
    error = OperatorError(f"`{name}` raised {exc!r}.")
    error.__cause__ = exc
    return error
