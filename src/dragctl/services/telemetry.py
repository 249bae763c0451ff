"""Span timing for ``--verbose`` runs.

A service method decorated with :func:`traced` opens a root span; code
inside it opens children with :func:`trace_span` (``validate`` in
preview, one ``event[i] <type>`` span per replayed event). When the
method returns a ServiceResult the tree lands in ``meta["telemetry"]``.

Telemetry is off unless :func:`enable_telemetry` ran in the current
context; then both helpers cost one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from dragctl.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("dragctl_telemetry_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("dragctl_current_span", default=None)

log = structlog.get_logger("dragctl.telemetry")


@dataclass
class Span:
    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    start_ns: int = field(default_factory=time.perf_counter_ns)
    end_ns: int | None = None

    @property
    def closed(self) -> bool:
        return self.end_ns is not None

    @property
    def duration_ms(self) -> float:
        """Elapsed time, or 0.0 while the span is still open."""
        if self.end_ns is None:
            return 0.0
        return (self.end_ns - self.start_ns) / 1_000_000

    def child(self, name: str) -> Span:
        span = Span(name=name)
        self.children.append(span)
        return span

    def end(self) -> None:
        if self.end_ns is None:
            self.end_ns = time.perf_counter_ns()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 3)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        return out


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a block as a child of the active span.

    Yields None (and records nothing) outside a traced call.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    with _activate(parent.child(name)) as span:
        yield span


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Run *func* under a root span named after its qualname."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        ok = False
        with _activate(Span(name=func.__qualname__)) as span:
            try:
                result = func(*args, **kwargs)
                ok = not isinstance(result, ServiceResult) or result.ok
            finally:
                span.end()
                log.debug(
                    "span.complete",
                    span_name=span.name,
                    duration_ms=round(span.duration_ms, 3),
                    ok=ok,
                    children=len(span.children),
                )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, for ad-hoc annotations."""
    if not _enabled.get():
        return None
    return _current_span.get()
