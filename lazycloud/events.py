"""
Decoded input events consumed by the controller.

The host (Textual) owns the terminal; it translates its own events into
these toolkit-independent values before handing them to the core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

MODIFIERS = ("ctrl", "alt", "shift")


@dataclass(frozen=True)
class KeyEvent:
    """A key press: a key code plus the modifiers held with it."""

    code: str
    modifiers: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def parse(cls, spec: str) -> KeyEvent:
        """Parse a key spec such as ``"j"``, ``"G"``, ``"ctrl+u"`` or ``"escape"``."""
        spec = spec.strip()
        if not spec:
            raise ValueError("Empty key spec")
        if spec == "+" or "+" not in spec:
            return cls(_normalize_code(spec))

        if spec.endswith("++"):
            # "ctrl++"
            mods, code = spec[:-2].split("+"), "+"
        else:
            *mods, code = spec.split("+")
        modifiers = frozenset(m.lower() for m in mods)
        unknown = modifiers - set(MODIFIERS)
        if unknown:
            raise ValueError(f"Unknown modifier(s) in {spec!r}: {', '.join(sorted(unknown))}")
        return cls(_normalize_code(code), modifiers)

    @property
    def char(self) -> str | None:
        """The printable character for this key, if it types one."""
        if self.modifiers & {"ctrl", "alt"}:
            return None
        if self.code == "space":
            return " "
        if len(self.code) == 1 and self.code.isprintable():
            return self.code
        return None

    def matches(self, spec: str) -> bool:
        """True if this key equals the parsed key spec."""
        return self == KeyEvent.parse(spec)

    def matches_any(self, specs: str) -> bool:
        """True if this key matches any spec in a comma-separated list."""
        return any(self.matches(s) for s in _split_specs(specs))

    def __str__(self) -> str:
        mods = [m for m in MODIFIERS if m in self.modifiers]
        return "+".join([*mods, self.code])


@dataclass(frozen=True)
class Resize:
    """Terminal size changed."""

    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    """Periodic timer event; also drives message draining."""


Event = Union[KeyEvent, Resize, Tick]

TICK = Tick()


def _normalize_code(code: str) -> str:
    if len(code) == 1:
        return code
    lowered = code.lower()
    aliases = {"esc": "escape", "return": "enter", "del": "delete", "pgup": "pageup", "pgdn": "pagedown"}
    return aliases.get(lowered, lowered)


def _split_specs(specs: str) -> list[str]:
    return [s.strip() for s in specs.split(",") if s.strip()]
