"""
Configurable key bindings.

Generic bindings (global, navigation, search, dialogs) live here so users can
remap them in ``config.toml``.  Page-specific bindings are declared on each
page class as ``BINDINGS``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from lazycloud.events import KeyEvent


class GlobalAction(str, Enum):
    QUIT = "quit"
    HELP = "help"
    THEME = "theme"
    BACK = "back"


class NavAction(str, Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    SELECT = "select"


class SearchAction(str, Enum):
    TOGGLE = "toggle"
    EXIT = "exit"


class DialogAction(str, Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    DISMISS = "dismiss"


Action = GlobalAction | NavAction | SearchAction | DialogAction


def _validate_specs(v: list[str]) -> list[str]:
    for spec in v:
        KeyEvent.parse(spec)
    return v


class _Section(BaseModel):
    @field_validator("*")
    @classmethod
    def parse_keys(cls, v: list[str]) -> list[str]:
        return _validate_specs(v)


class GlobalKeys(_Section):
    quit: list[str] = Field(default_factory=lambda: ["q", "ctrl+c"])
    help: list[str] = Field(default_factory=lambda: ["?"])
    theme: list[str] = Field(default_factory=lambda: ["t"])
    back: list[str] = Field(default_factory=lambda: ["escape"])


class NavigationKeys(_Section):
    up: list[str] = Field(default_factory=lambda: ["k", "up"])
    down: list[str] = Field(default_factory=lambda: ["j", "down"])
    page_up: list[str] = Field(default_factory=lambda: ["pageup"])
    page_down: list[str] = Field(default_factory=lambda: ["pagedown"])
    home: list[str] = Field(default_factory=lambda: ["g", "home"])
    end: list[str] = Field(default_factory=lambda: ["G", "end"])
    select: list[str] = Field(default_factory=lambda: ["enter"])


class SearchKeys(_Section):
    toggle: list[str] = Field(default_factory=lambda: ["/"])
    exit: list[str] = Field(default_factory=lambda: ["escape"])


class DialogKeys(_Section):
    confirm: list[str] = Field(default_factory=lambda: ["y", "Y", "enter"])
    cancel: list[str] = Field(default_factory=lambda: ["n", "N", "escape"])
    dismiss: list[str] = Field(default_factory=lambda: ["enter", "escape", "q"])


class KeymapConfig(BaseModel):
    """The ``[keys.*]`` tables of config.toml."""

    global_: GlobalKeys = Field(default_factory=GlobalKeys, alias="global")
    navigation: NavigationKeys = Field(default_factory=NavigationKeys)
    search: SearchKeys = Field(default_factory=SearchKeys)
    dialog: DialogKeys = Field(default_factory=DialogKeys)

    model_config = {"populate_by_name": True}


class KeyResolver:
    """Answers "does this key trigger that action" for the generic bindings."""

    def __init__(self, keymap: KeymapConfig | None = None) -> None:
        keymap = keymap or KeymapConfig()
        self._bindings: dict[Action, tuple[KeyEvent, ...]] = {}
        sections: list[tuple[type[Enum], BaseModel]] = [
            (GlobalAction, keymap.global_),
            (NavAction, keymap.navigation),
            (SearchAction, keymap.search),
            (DialogAction, keymap.dialog),
        ]
        for enum_cls, section in sections:
            for action in enum_cls:
                specs = getattr(section, action.value)
                self._bindings[action] = tuple(KeyEvent.parse(s) for s in specs)

    def matches(self, key: KeyEvent, action: Action) -> bool:
        return key in self._bindings.get(action, ())

    def keys_for(self, action: Action) -> tuple[KeyEvent, ...]:
        return self._bindings.get(action, ())

    def describe(self, action: Action) -> str:
        """Human-readable key list for help screens, e.g. ``"k/up"``."""
        return "/".join(str(k) for k in self.keys_for(action))
