from __future__ import annotations

from typing import Iterator

import pytest

from report_toolkit.streams import Stream, collect, filter_items, flat_map, from_any, map_items


def test_pipe_is_lazy_and_pull_based() -> None:
    pulled: list[int] = []

    def source() -> Iterator[int]:
        for value in range(5):
            pulled.append(value)
            yield value

    stream = Stream(source()).pipe(map_items(lambda value: value * 10))

    assert pulled == []
    assert next(stream) == 0
    assert next(stream) == 10
    assert pulled == [0, 1]


def test_close_propagates_upstream() -> None:
    cleaned_up: list[str] = []

    def source() -> Iterator[int]:
        try:
            yield from range(100)
        finally:
            cleaned_up.append("source")

    upstream = Stream(source())
    downstream = upstream.pipe(map_items(str), filter_items(lambda text: text != "1"))

    assert next(downstream) == "0"
    downstream.close()

    assert upstream.closed
    assert cleaned_up == ["source"]
    assert list(downstream) == []


def test_context_manager_closes_stream() -> None:
    with Stream(iter([1, 2, 3])) as stream:
        assert next(stream) == 1
    assert stream.closed


def test_flat_map_preserves_order() -> None:
    stream = from_any([1, 2]).pipe(flat_map(lambda value: [value, value]))
    assert stream.to_list() == [1, 1, 2, 2]


def test_from_any_treats_mappings_and_strings_as_single_items() -> None:
    assert from_any({"a": 1}).to_list() == [{"a": 1}]
    assert from_any("text").to_list() == ["text"]
    assert from_any(None).to_list() == []
    assert from_any((1, 2)).to_list() == [1, 2]


def test_collect_raises_without_best_effort() -> None:
    def failing() -> Iterator[int]:
        yield 1
        raise ValueError("boom")

    with pytest.raises(ValueError):
        collect(Stream(failing()))


def test_collect_best_effort_returns_partial_items() -> None:
    errors: list[str] = []

    def failing() -> Iterator[int]:
        yield 1
        yield 2
        raise ValueError("boom")

    items = collect(
        Stream(failing()),
        best_effort=True,
        on_error=lambda exc, partial: errors.append(f"{exc}:{len(partial)}"),
    )

    assert items == [1, 2]
    assert errors == ["boom:2"]
