from threading import Thread

from stockfighter import Completed, Error, Next, Observable, Subject
from stockfighter._core import operators
from stockfighter.exceptions import OperatorError


def fail(value):
    raise ValueError(value)


class TestMap:
    def test_map_with_success(self, history):
        Observable.just(2).map(lambda value: value * 3).subscribe(history)
        assert list(history) == [Next(6), Completed()]

    def test_map_with_chained_operators(self, history):
        source = Subject()
        source.map(str).map(lambda value: value + "!").subscribe(history)

        source.on_next(1)
        source.on_next(2)
        source.on_completed()
        assert list(history) == [Next("1!"), Next("2!"), Completed()]

    def test_map_with_raising_transform_emit_operator_error(self, history):
        source = Subject()
        source.map(fail).subscribe(history)

        source.on_next(1)
        source.on_next(2)
        source.on_completed()
        assert history.values == []
        assert history.completions == 0

        error, = history.errors
        assert isinstance(error, OperatorError)
        assert isinstance(error.__cause__, ValueError)
        assert len(source) == 0

    def test_map_with_source_error(self, history):
        error = RuntimeError()
        Observable.error(error).map(str).subscribe(history)
        assert history.errors == [error]

    def test_map_with_module_function(self, history):
        operators.map(Observable.just(1), lambda value: -value).subscribe(history)
        assert history.values == [-1]

    def test_map_with_dispose_unsubscribe_source(self, history):
        source = Subject()
        subscription = source.map(str).subscribe(history)
        assert len(source) == 1

        subscription.dispose()
        source.on_next(1)
        assert len(source) == 0
        assert len(history) == 0


class TestFilter:
    def test_filter_with_success(self, history):
        source = Subject()
        source.filter(lambda value: value % 2 == 0).subscribe(history)

        for value in range(6):
            source.on_next(value)

        source.on_completed()
        assert list(history) == [Next(0), Next(2), Next(4), Completed()]

    def test_filter_with_raising_predicate_emit_operator_error(self, history):
        source = Subject()
        source.filter(fail).subscribe(history)

        source.on_next(1)
        source.on_next(2)

        error, = history.errors
        assert isinstance(error, OperatorError)
        assert history.values == []
        assert len(source) == 0


class TestFlatMap:
    def test_flat_map_with_success(self, history):
        Observable.just(1).flat_map(lambda value: Observable.just(value + 1)).subscribe(history)
        assert list(history) == [Next(2), Completed()]

    def test_flat_map_with_empty_source(self, history):
        Observable.empty().flat_map(Observable.just).subscribe(history)
        assert list(history) == [Completed()]

    def test_flat_map_with_interleaved_inners(self, history):
        source = Subject()
        inners = {"a": Subject(), "b": Subject()}
        source.flat_map(inners.__getitem__).subscribe(history)

        source.on_next("a")
        source.on_next("b")
        inners["a"].on_next(1)
        inners["b"].on_next(2)
        inners["a"].on_next(3)
        assert history.values == [1, 2, 3]

    def test_flat_map_with_source_completed_wait_for_inners(self, history):
        source = Subject()
        inners = {"a": Subject(), "b": Subject()}
        source.flat_map(inners.__getitem__).subscribe(history)

        source.on_next("a")
        source.on_next("b")
        source.on_completed()
        inners["a"].on_completed()
        assert history.completions == 0

        inners["b"].on_next(1)
        inners["b"].on_completed()
        assert list(history) == [Next(1), Completed()]

    def test_flat_map_with_inners_completed_wait_for_source(self, history):
        source = Subject()
        inner = Subject()
        source.flat_map(lambda value: inner).subscribe(history)

        source.on_next(None)
        inner.on_completed()
        assert history.completions == 0
        assert len(source) == 1

        source.on_completed()
        assert history.completions == 1

    def test_flat_map_with_finished_inner_release_subscription(self, history):
        source = Subject()
        inner = Subject()
        source.flat_map(lambda value: inner).subscribe(history)

        source.on_next(None)
        assert len(inner) == 1

        inner.on_completed()
        assert len(inner) == 0

    def test_flat_map_with_inner_error_dispose_everything(self, history):
        source = Subject()
        inners = {"a": Subject(), "b": Subject()}
        source.flat_map(inners.__getitem__).subscribe(history)
        error = RuntimeError()

        source.on_next("a")
        source.on_next("b")
        inners["a"].on_error(error)
        inners["b"].on_next(1)
        inners["b"].on_error(RuntimeError())
        source.on_completed()

        assert list(history) == [Error(error)]
        assert len(source) == 0
        assert len(inners["a"]) == 0
        assert len(inners["b"]) == 0

    def test_flat_map_with_source_error_dispose_inners(self, history):
        source = Subject()
        inner = Subject()
        source.flat_map(lambda value: inner).subscribe(history)
        error = RuntimeError()

        source.on_next(None)
        source.on_error(error)
        inner.on_next(1)
        assert history.errors == [error]
        assert history.values == []
        assert len(inner) == 0

    def test_flat_map_with_raising_selector_emit_operator_error(self, history):
        source = Subject()
        inner = Subject()
        calls = []

        def selector(value):
            calls.append(value)

            if value == 2:
                raise ValueError(value)

            return inner

        source.flat_map(selector).subscribe(history)

        source.on_next(1)
        source.on_next(2)
        source.on_next(3)
        inner.on_next("late")

        error, = history.errors
        assert isinstance(error, OperatorError)
        assert isinstance(error.__cause__, ValueError)
        assert calls == [1, 2]
        assert history.values == []
        assert len(inner) == 0

    def test_flat_map_with_dispose_unsubscribe_everything(self, history):
        source = Subject()
        inner = Subject()
        subscription = source.flat_map(lambda value: inner).subscribe(history)

        source.on_next(None)
        subscription.dispose()
        inner.on_next(1)
        assert len(source) == 0
        assert len(inner) == 0
        assert len(history) == 0

    def test_flat_map_with_many_threads(self, history):
        source = Subject()
        inners = [Subject() for _ in range(8)]
        source.flat_map(inners.__getitem__).subscribe(history)

        for index in range(len(inners)):
            source.on_next(index)

        source.on_completed()

        def publish(index):
            for value in range(100):
                inners[index].on_next(index * 100 + value)

            inners[index].on_completed()

        threads = [Thread(target=publish, args=(index,)) for index in range(len(inners))]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

        assert sorted(history.values) == list(range(800))
        assert history.completions == 1
        assert history.wait()
