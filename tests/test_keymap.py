"""Tests for events.py and keymap.py - key specs and configurable bindings."""

import pytest
from pydantic import ValidationError

from lazycloud.events import KeyEvent
from lazycloud.keymap import (
    DialogAction,
    GlobalAction,
    KeymapConfig,
    KeyResolver,
    NavAction,
)


class TestKeyEventParse:
    """Tests for KeyEvent.parse."""

    def test_plain_character(self) -> None:
        assert KeyEvent.parse("j") == KeyEvent("j")

    def test_case_is_significant_for_characters(self) -> None:
        """Test that G and g are different keys."""
        assert KeyEvent.parse("G") != KeyEvent.parse("g")

    def test_modifiers(self) -> None:
        assert KeyEvent.parse("ctrl+u") == KeyEvent("u", frozenset({"ctrl"}))

    def test_aliases(self) -> None:
        """Test that common aliases normalise."""
        assert KeyEvent.parse("Esc") == KeyEvent("escape")
        assert KeyEvent.parse("return") == KeyEvent("enter")

    def test_plus_key(self) -> None:
        assert KeyEvent.parse("+") == KeyEvent("+")
        assert KeyEvent.parse("ctrl++") == KeyEvent("+", frozenset({"ctrl"}))

    def test_unknown_modifier_raises(self) -> None:
        with pytest.raises(ValueError):
            KeyEvent.parse("hyper+x")

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError):
            KeyEvent.parse("  ")


class TestKeyEventChar:
    """Tests for KeyEvent.char and str()."""

    def test_printable(self) -> None:
        assert KeyEvent("a").char == "a"
        assert KeyEvent("space").char == " "

    def test_non_printable(self) -> None:
        assert KeyEvent("enter").char is None
        assert KeyEvent.parse("ctrl+a").char is None

    def test_str_orders_modifiers(self) -> None:
        assert str(KeyEvent("x", frozenset({"shift", "ctrl"}))) == "ctrl+shift+x"

    def test_matches_any(self) -> None:
        assert KeyEvent("delete").matches_any("d, delete")
        assert not KeyEvent("x").matches_any("d,delete")


class TestKeyResolver:
    """Tests for KeyResolver defaults and overrides."""

    def test_defaults(self) -> None:
        keys = KeyResolver()
        assert keys.matches(KeyEvent("q"), GlobalAction.QUIT)
        assert keys.matches(KeyEvent("j"), NavAction.DOWN)
        assert keys.matches(KeyEvent("down"), NavAction.DOWN)
        assert keys.matches(KeyEvent("escape"), GlobalAction.BACK)
        assert not keys.matches(KeyEvent("x"), GlobalAction.QUIT)

    def test_override_from_config(self) -> None:
        """Test that a [keys.global] table replaces the default keys."""
        keymap = KeymapConfig.model_validate({"global": {"quit": ["ctrl+q"]}})
        keys = KeyResolver(keymap)

        assert keys.matches(KeyEvent.parse("ctrl+q"), GlobalAction.QUIT)
        assert not keys.matches(KeyEvent("q"), GlobalAction.QUIT)

    def test_invalid_spec_rejected(self) -> None:
        with pytest.raises(ValidationError):
            KeymapConfig.model_validate({"dialog": {"confirm": ["super+y"]}})

    def test_describe(self) -> None:
        assert KeyResolver().describe(NavAction.UP) == "k/up"
        assert "enter" in KeyResolver().describe(DialogAction.DISMISS)
