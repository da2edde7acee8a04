"""Pull-based, single-pass streams with explicit upstream cancellation.

Every engine returns a :class:`Stream`. Nothing is produced until the consumer
asks for the next item, and :meth:`Stream.close` tells every upstream producer
to stop.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, Optional, TypeVar

T = TypeVar("T")

Stage = Callable[[Iterator[Any]], Iterable[Any]]


class Stream(Generic[T]):
    """Iterator wrapper that remembers the streams it was built from."""

    __slots__ = ("_iterator", "_upstream", "_closed")

    def __init__(self, source: Iterable[T], *, upstream: Optional["Stream[Any]"] = None) -> None:
        self._iterator: Iterator[T] = iter(source)
        self._upstream = upstream
        self._closed = False

    def __iter__(self) -> "Stream[T]":
        return self

    def __next__(self) -> T:
        if self._closed:
            raise StopIteration
        return next(self._iterator)

    def __enter__(self) -> "Stream[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop producing items and propagate the stop request upstream."""

        if self._closed:
            return
        self._closed = True
        close = getattr(self._iterator, "close", None)
        if close is not None:
            close()
        if self._upstream is not None:
            self._upstream.close()

    # ------------------------------------------------------------------
    def pipe(self, *stages: Stage) -> "Stream[Any]":
        """Chain ``stages`` after this stream; each stage wraps the previous one."""

        current: Stream[Any] = self
        for stage in stages:
            current = Stream(stage(current), upstream=current)
        return current

    def to_list(self) -> list[T]:
        """Drain the stream. The stream is closed afterwards even on error."""

        try:
            return list(self)
        finally:
            self.close()


def from_any(value: Any) -> Stream[Any]:
    """Wrap ``value`` in a stream.

    Mappings (including reports) and strings count as a single item; any other
    iterable is streamed item by item; ``None`` is an empty stream.
    """

    if isinstance(value, Stream):
        return value
    if value is None:
        return Stream(())
    if isinstance(value, (Mapping, str, bytes)):
        return Stream((value,))
    if isinstance(value, Iterable):
        return Stream(value)
    return Stream((value,))


def map_items(func: Callable[[Any], Any]) -> Stage:
    """Stage applying ``func`` to every item."""

    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for item in upstream:
            yield func(item)

    return stage


def flat_map(func: Callable[[Any], Iterable[Any]]) -> Stage:
    """Stage emitting every item of ``func(item)`` for every upstream item."""

    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for item in upstream:
            yield from func(item)

    return stage


def filter_items(predicate: Callable[[Any], bool]) -> Stage:
    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for item in upstream:
            if predicate(item):
                yield item

    return stage


def collect(
    stream: Iterable[T],
    *,
    best_effort: bool = False,
    on_error: Callable[[Exception, list[T]], None] | None = None,
) -> list[T]:
    """Materialize ``stream``.

    On failure the error propagates and the partial list is discarded, unless
    ``best_effort`` is set, in which case ``on_error`` is notified and the
    items produced so far are returned.
    """

    stream = from_any(stream)
    items: list[T] = []
    try:
        for item in stream:
            items.append(item)
    except Exception as exc:
        if not best_effort:
            raise
        if on_error is not None:
            on_error(exc, items)
    finally:
        stream.close()
    return items


__all__ = [
    "Stage",
    "Stream",
    "collect",
    "filter_items",
    "flat_map",
    "from_any",
    "map_items",
]
