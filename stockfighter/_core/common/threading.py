import itertools
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock, RLock


@contextmanager
def synchronized[L: (Lock, RLock)](lock: L) -> Iterator[L]:
    with lock:
        yield lock


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class AtomicCounter:
    __count: Iterator[int] = field(default_factory=lambda: itertools.count(1), init=False)
    __lock: Lock = field(default_factory=Lock, init=False)

    def next(self) -> int:
        with synchronized(self.__lock):
            return next(self.__count)
