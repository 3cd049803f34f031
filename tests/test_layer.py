"""Tests for _layer module."""

import io
import re
import threading
from typing import Any

import pytest

from taskscope._config import LayerConfig
from taskscope._errors import MissingSpanRecordError
from taskscope._layer import Layer, LineWriter, SpanRecordStore, layer
from taskscope._registry import Registry
from taskscope._types import Attributes, Level, Metadata

_TS = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{6}Z"


def _setup(ansi: bool = False) -> tuple[Registry, Layer, io.StringIO]:
    stream = io.StringIO()
    fmt = Layer(LayerConfig(ansi=ansi), stream=stream)
    return Registry(fmt), fmt, stream


def _lines(stream: io.StringIO) -> list[str]:
    return stream.getvalue().splitlines()


def _span_md(name: str, target: str = "app", level: Level = Level.INFO) -> Metadata:
    return Metadata(name=name, target=target, level=level, is_span=True)


def test_layer_factory_uses_defaults() -> None:
    fmt = layer()
    assert isinstance(fmt, Layer)
    assert fmt.config == LayerConfig()
    assert fmt.config.ansi is True


def test_layer_is_always_interested_and_enabled() -> None:
    fmt = Layer()
    for level in Level:
        md = Metadata("x", "y", level)
        assert fmt.interested(md)
        assert fmt.enabled(md)


def test_new_span_writes_new_line() -> None:
    registry, fmt, stream = _setup()
    span_id = registry.new_span(_span_md("my.span"), [("a", 1)])

    lines = _lines(stream)
    assert len(lines) == 1
    assert re.fullmatch(rf"{_TS}  INFO my\.span\[{span_id}\]\{{a=1\}} new", lines[0])
    assert span_id in fmt.records


def test_event_without_scope() -> None:
    registry, _, stream = _setup()
    registry.event(
        Metadata("event", "events", Level.INFO),
        [("field", "value"), ("message", "my message")],
        parent=None,
    )
    assert re.fullmatch(rf"{_TS}  INFO events: field=value my message", _lines(stream)[0])


def test_lifecycle_lines_include_own_span_in_scope() -> None:
    registry, _, stream = _setup()
    parent = registry.new_span(_span_md("outer"), parent=None)
    child = registry.new_span(_span_md("inner", level=Level.DEBUG), parent=parent)
    token = registry.enter(child)
    registry.exit(child, token)

    lines = _lines(stream)
    prefix = f"outer[{parent}]{{}} inner[{child}]{{}} "
    assert lines[1].endswith(f"DEBUG {prefix}new")
    assert lines[2].endswith(f"DEBUG {prefix}enter")
    assert lines[3].endswith(f"DEBUG {prefix}exit")


def test_close_writes_line_and_drops_record() -> None:
    registry, fmt, stream = _setup()
    span_id = registry.new_span(_span_md("s"), parent=None)
    registry.try_close(span_id)

    assert _lines(stream)[-1].endswith(f"s[{span_id}]{{}} close")
    assert span_id not in fmt.records
    assert len(fmt.records) == 0


def test_duplicate_creation_is_a_noop() -> None:
    registry, fmt, stream = _setup()
    span_id = registry.new_span(_span_md("orig"), [("x", 1)], parent=None)
    before = fmt.records.get(span_id).rendering()
    line_count = len(_lines(stream))

    attrs = Attributes(metadata=_span_md("other"), fields=(("y", 2),))
    fmt.on_new_span(attrs, span_id, registry)

    assert fmt.records.get(span_id).rendering() == before
    assert len(_lines(stream)) == line_count


def test_missing_record_for_scope_ancestor_is_fatal() -> None:
    registry, _, _ = _setup()
    late = Layer(LayerConfig(ansi=False), stream=io.StringIO())
    span_id = registry.new_span(_span_md("s"), parent=None)
    registry.add_layer(late)

    with pytest.raises(MissingSpanRecordError):
        late.on_enter(span_id, registry)
    with pytest.raises(MissingSpanRecordError):
        registry.event(Metadata("e", "app"), parent=span_id)


def test_ansi_output_is_colored() -> None:
    registry, _, stream = _setup(ansi=True)
    registry.new_span(_span_md("runtime.spawn", "tokio::task"), parent=None)
    assert "\x1b[" in stream.getvalue()
    assert "38;2;72;158;108" in stream.getvalue()


def test_record_store_first_insert_wins() -> None:
    registry, fmt, _ = _setup()
    span_id = registry.new_span(_span_md("a"), parent=None)
    store = SpanRecordStore()
    record = fmt.records.get(span_id)

    assert store.insert(record) is True
    assert store.insert(record) is False
    assert store.get(span_id) is record
    store.remove(span_id)
    assert span_id not in store
    with pytest.raises(MissingSpanRecordError):
        store.get(span_id)


def test_line_writer_defaults_to_stdout(capsys: Any) -> None:
    LineWriter().write_line("hello")
    assert capsys.readouterr().out == "hello\n"


def test_concurrent_lines_never_interleave() -> None:
    registry, _, stream = _setup()
    barrier = threading.Barrier(8)

    def worker(n: int) -> None:
        barrier.wait()
        for i in range(50):
            registry.event(
                Metadata("e", "worker"), [("n", n), ("i", i)], parent=None
            )

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = _lines(stream)
    assert len(lines) == 400
    for line in lines:
        assert re.fullmatch(rf"{_TS}  INFO worker: n=\d, i=\d+", line)


def test_concurrent_span_creation_renders_each_once() -> None:
    registry, fmt, _ = _setup()
    ids: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(25):
            span_id = registry.new_span(_span_md("runtime.resource"), parent=None)
            with lock:
                ids.append(span_id)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(ids)) == 100
    assert len(fmt.records) == 100
