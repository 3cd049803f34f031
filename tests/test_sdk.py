"""Tests for _sdk module and the public entry points."""

import io
from typing import Any

import taskscope
import taskscope._sdk as sdk_mod
from taskscope._types import Level


def setup_function() -> None:
    """Reset SDK state before each test."""
    sdk_mod._sdk_instance = None


def teardown_function() -> None:
    taskscope.shutdown()


def test_init_creates_sdk() -> None:
    taskscope.init(ansi=False)
    assert sdk_mod._sdk_instance is not None
    assert sdk_mod._sdk_instance.config.ansi is False
    assert sdk_mod._sdk_instance.registry is not None


def test_shutdown_clears_sdk() -> None:
    taskscope.init()
    taskscope.shutdown()
    assert sdk_mod._sdk_instance is None


def test_reinit_shuts_down_previous() -> None:
    taskscope.init(ansi=True)
    first = sdk_mod._sdk_instance
    taskscope.init(ansi=False)
    assert sdk_mod._sdk_instance is not first
    assert first is not None
    assert first.registry is None
    assert sdk_mod._sdk_instance is not None
    assert sdk_mod._sdk_instance.config.ansi is False


def test_uninit_graceful_span(capsys: Any) -> None:
    """span() should work without init and write nothing."""
    with taskscope.span("graceful", key="val") as s:
        taskscope.info("inside")
    assert s.id is None
    assert capsys.readouterr().out == ""


def test_uninit_graceful_instrument(capsys: Any) -> None:
    @taskscope.instrument
    def my_func() -> str:
        return "ok"

    assert my_func() == "ok"
    assert capsys.readouterr().out == ""


def test_default_stream_is_stdout(capsys: Any) -> None:
    taskscope.init(ansi=False)
    taskscope.info("to stdout")
    out = capsys.readouterr().out
    assert out.endswith(f" INFO {__name__}: to stdout\n")


def test_target_defaults_to_caller_module() -> None:
    stream = io.StringIO()
    taskscope.init(ansi=False, stream=stream)
    taskscope.warn("careful")
    taskscope.event(Level.ERROR, "boom")
    with taskscope.span("s"):
        pass

    lines = stream.getvalue().splitlines()
    assert lines[0].endswith(f" WARN {__name__}: careful")
    assert lines[1].endswith(f"ERROR {__name__}: boom")
    assert sdk_mod._sdk_instance is not None
    assert len(lines) == 6


def test_explicit_target() -> None:
    stream = io.StringIO()
    taskscope.init(ansi=False, stream=stream)
    taskscope.event(Level.DEBUG, "polled", target="runtime::resource::poll_op", ready=True)
    assert stream.getvalue().rstrip("\n").endswith(
        "DEBUG runtime::resource::poll_op: ready=true polled"
    )


def test_level_helpers() -> None:
    stream = io.StringIO()
    taskscope.init(ansi=False, stream=stream)
    taskscope.trace("t")
    taskscope.debug("d")
    taskscope.info("i")
    taskscope.warn("w")
    taskscope.error("e")

    tokens = [line.split(" ", 1)[1][:5] for line in stream.getvalue().splitlines()]
    assert tokens == ["TRACE", "DEBUG", " INFO", " WARN", "ERROR"]


def test_event_without_message() -> None:
    stream = io.StringIO()
    taskscope.init(ansi=False, stream=stream)
    taskscope.error(field="only one")
    assert stream.getvalue().rstrip("\n").endswith(f"ERROR {__name__}: field=only one")


def test_span_after_init_registers() -> None:
    taskscope.init(ansi=False, stream=io.StringIO())
    assert sdk_mod._sdk_instance is not None
    registry = sdk_mod._sdk_instance.registry
    assert registry is not None

    s = taskscope.span("buffered", key="val")
    assert s.id in registry
    s.close()
    assert len(registry) == 0


def test_shutdown_silences_existing_spans() -> None:
    stream = io.StringIO()
    taskscope.init(ansi=False, stream=stream)
    s = taskscope.span("outer")
    taskscope.shutdown()

    with s:
        taskscope.info("after shutdown")

    assert len(stream.getvalue().splitlines()) == 1


def test_reinit_silences_spans_from_previous_registry() -> None:
    first = io.StringIO()
    taskscope.init(ansi=False, stream=first)
    s = taskscope.span("old")
    second = io.StringIO()
    taskscope.init(ansi=False, stream=second)

    with s:
        pass

    assert len(first.getvalue().splitlines()) == 1
    assert second.getvalue() == ""
