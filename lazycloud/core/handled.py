"""
The three-way result of every input-handling call.

Elements, pages and overlays all answer ``handle_key`` with one of:

- ``Ignored``: not handled, the caller may route the key further
- ``Consumed``: handled, nothing to report
- ``Produced(value)``: handled, and ``value`` is the output (an element's
  typed output, or a page/overlay's business message)

The helpers below are the only sanctioned conversions between layers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ignored:
    """Input was not handled; the caller should process it."""


@dataclass(frozen=True)
class Consumed:
    """Input was handled and produced nothing."""


@dataclass(frozen=True)
class Produced(Generic[T]):
    """Input was handled and produced ``value``."""

    value: T


Handled = Union[Ignored, Consumed, Produced[T]]

IGNORED = Ignored()
CONSUMED = Consumed()


def produced(value: T) -> Produced[T]:
    """Wrap an output or message: the key was handled and yielded ``value``."""
    return Produced(value)


def from_optional(value: T | None) -> Handled[T]:
    """A handler that always consumes the key but only sometimes has output."""
    if value is None:
        return CONSUMED
    return Produced(value)


def is_consumed(result: Handled) -> bool:
    """True for ``Consumed`` and ``Produced``: routing stops here."""
    return not isinstance(result, Ignored)


def map_output(result: Handled[T], fn: Callable[[T], Handled[U]]) -> Handled[U]:
    """Translate an element's output into the caller's vocabulary.

    ``fn`` decides what each output means (usually a business message, or
    ``CONSUMED`` for outputs the page does not care about).  ``Ignored`` and
    ``Consumed`` pass through untouched so the page can still apply its own
    bindings after an ignored key.
    """
    if isinstance(result, Produced):
        return fn(result.value)
    return result


def absorb(result: Handled) -> Handled:
    """Drop any output while keeping the consumed/ignored distinction."""
    if isinstance(result, Produced):
        return CONSUMED
    return result
