#!/usr/bin/env python3
"""Formatting hot-path benchmark.

Measures the cost of:
  1. field recording + formatting for a small event
  2. span creation (classify + one-shot render)
  3. a full event line inside a three-deep scope
  4. a full span lifecycle (new, enter, exit, close)

Output goes to an in-memory stream so terminal speed is not measured.

Usage:
    python benchmarks/bench_overhead.py
"""

from __future__ import annotations

import io
import time

from taskscope._config import LayerConfig
from taskscope._fields import RecordedFields
from taskscope._format import SpanRecord
from taskscope._layer import Layer
from taskscope._registry import Registry
from taskscope._types import Metadata

_SPAN_MD = Metadata("runtime.spawn", "tokio::task", is_span=True)
_EVENT_MD = Metadata("event", "runtime::resource::poll_op")


def _registry() -> tuple[Registry, io.StringIO]:
    stream = io.StringIO()
    return Registry(Layer(LayerConfig(ansi=True), stream=stream)), stream


def bench_fields(iterations: int = 200_000) -> float:
    """Benchmark: record three fields and a message, then format."""
    pairs = [("op_name", "poll_ready"), ("is_ready", True), ("n", 3), ("message", "polled")]

    for _ in range(5000):
        RecordedFields.for_event().record_all(pairs)

    start = time.perf_counter_ns()
    for _ in range(iterations):
        fields = RecordedFields.for_event()
        fields.record_all(pairs)
        fields.formatted_updated()
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def bench_span_record(iterations: int = 100_000) -> float:
    """Benchmark: classify and render a span once."""
    fields = RecordedFields.for_span()
    fields.record_all([("kind", "task"), ("task.name", "worker")])

    start = time.perf_counter_ns()
    for i in range(iterations):
        SpanRecord.create(i, _SPAN_MD, fields)
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def bench_scoped_event(iterations: int = 50_000) -> float:
    """Benchmark: one event line under three entered spans."""
    registry, stream = _registry()
    a = registry.new_span(_SPAN_MD, [("kind", "task")], parent=None)
    b = registry.new_span(_SPAN_MD, parent=a)
    c = registry.new_span(_SPAN_MD, parent=b)
    fields = [("is_ready", True), ("message", "polled")]

    start = time.perf_counter_ns()
    for _ in range(iterations):
        registry.event(_EVENT_MD, fields, parent=c)
        if stream.tell() > 10_000_000:
            stream.seek(0)
            stream.truncate()
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def bench_span_lifecycle(iterations: int = 20_000) -> float:
    """Benchmark: new → enter → exit → close, four lines per iteration."""
    registry, stream = _registry()

    start = time.perf_counter_ns()
    for _ in range(iterations):
        span_id = registry.new_span(_SPAN_MD, [("kind", "task")], parent=None)
        token = registry.enter(span_id)
        registry.exit(span_id, token)
        registry.try_close(span_id)
        if stream.tell() > 10_000_000:
            stream.seek(0)
            stream.truncate()
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def main() -> None:
    print("=" * 60)
    print("taskscope Formatting Overhead Benchmark")
    print("=" * 60)

    results: list[tuple[str, float, str]] = []

    ns = bench_fields()
    status = "PASS" if ns < 5000 else "WARN" if ns < 10000 else "FAIL"
    results.append(("Record + format 4 fields", ns, f"{status} (target < 5μs)"))

    ns = bench_span_record()
    status = "PASS" if ns < 20000 else "WARN" if ns < 40000 else "FAIL"
    results.append(("SpanRecord.create", ns, f"{status} (target < 20μs)"))

    ns = bench_scoped_event()
    status = "PASS" if ns < 50000 else "WARN" if ns < 100000 else "FAIL"
    results.append(("Event line, 3-deep scope", ns, f"{status} (target < 50μs)"))

    ns = bench_span_lifecycle()
    status = "PASS" if ns < 200000 else "WARN" if ns < 400000 else "FAIL"
    results.append(("Span lifecycle (4 lines)", ns, f"{status} (target < 200μs)"))

    print()
    for name, ns_val, note in results:
        if ns_val >= 1000:
            display = f"{ns_val / 1000:.2f}μs"
        else:
            display = f"{ns_val:.0f}ns"
        print(f"  {name:40s}  {display:>10s}   {note}")

    print()
    all_pass = all("PASS" in r[2] or "WARN" in r[2] for r in results)
    if all_pass:
        print("All benchmarks within acceptable range.")
    else:
        print("WARNING: Some benchmarks exceeded target. Review above.")


if __name__ == "__main__":
    main()
