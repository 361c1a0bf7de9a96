"""Colour themes (Catppuccin flavours) passed into every render call."""

from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style


@dataclass(frozen=True)
class Theme:
    """Immutable palette of hex colours plus semantic accessors."""

    name: str
    base: str
    mantle: str
    surface0: str
    surface1: str
    overlay0: str
    overlay1: str
    text: str
    subtext0: str
    subtext1: str
    mauve: str
    lavender: str
    green: str
    yellow: str
    peach: str
    red: str
    blue: str

    @property
    def primary(self) -> str:
        return self.mauve

    @property
    def accent(self) -> str:
        return self.lavender

    @property
    def success(self) -> str:
        return self.green

    @property
    def warning(self) -> str:
        return self.yellow

    @property
    def error(self) -> str:
        return self.red

    @property
    def info(self) -> str:
        return self.blue

    @property
    def border(self) -> str:
        return self.surface1

    @property
    def selection_bg(self) -> str:
        return self.surface0

    @property
    def header(self) -> str:
        return self.blue

    def style(self, color: str, *, bold: bool = False, dim: bool = False) -> Style:
        """Rich style for one of this theme's colours."""
        return Style(color=color, bold=bold, dim=dim)

    @property
    def highlight(self) -> Style:
        return Style(color=self.lavender, bgcolor=self.surface0, bold=True)


MOCHA = Theme(
    name="mocha",
    base="#1e1e2e",
    mantle="#181825",
    surface0="#313244",
    surface1="#45475a",
    overlay0="#6c7086",
    overlay1="#7f849c",
    text="#cdd6f4",
    subtext0="#a6adc8",
    subtext1="#bac2de",
    mauve="#cba6f7",
    lavender="#b4befe",
    green="#a6e3a1",
    yellow="#f9e2af",
    peach="#fab387",
    red="#f38ba8",
    blue="#89b4fa",
)

MACCHIATO = Theme(
    name="macchiato",
    base="#24273a",
    mantle="#1e2030",
    surface0="#363a4f",
    surface1="#494d64",
    overlay0="#6e738d",
    overlay1="#8087a2",
    text="#cad3f5",
    subtext0="#a5adcb",
    subtext1="#b8c0e0",
    mauve="#c6a0f6",
    lavender="#b7bdf8",
    green="#a6da95",
    yellow="#eed49f",
    peach="#f5a97f",
    red="#ed8796",
    blue="#8aadf4",
)

FRAPPE = Theme(
    name="frappe",
    base="#303446",
    mantle="#292c3c",
    surface0="#414559",
    surface1="#51576d",
    overlay0="#737994",
    overlay1="#838ba7",
    text="#c6d0f5",
    subtext0="#a5adce",
    subtext1="#b5bfe2",
    mauve="#ca9ee6",
    lavender="#babbf1",
    green="#a6d189",
    yellow="#e5c890",
    peach="#ef9f76",
    red="#e78284",
    blue="#8caaee",
)

LATTE = Theme(
    name="latte",
    base="#eff1f5",
    mantle="#e6e9ef",
    surface0="#ccd0da",
    surface1="#bcc0cc",
    overlay0="#9ca0b0",
    overlay1="#8c8fa1",
    text="#4c4f69",
    subtext0="#6c6f85",
    subtext1="#5c5f77",
    mauve="#8839ef",
    lavender="#7287fd",
    green="#40a02b",
    yellow="#df8e1d",
    peach="#fe640b",
    red="#d20f39",
    blue="#1e66f5",
)

THEMES: dict[str, Theme] = {t.name: t for t in (MOCHA, MACCHIATO, FRAPPE, LATTE)}
DEFAULT_THEME = MOCHA.name


def get_theme(name: str) -> Theme:
    """Look up a theme by name, falling back to the default."""
    return THEMES.get(name.lower(), THEMES[DEFAULT_THEME])


def next_theme(name: str) -> Theme:
    """The theme after ``name`` in cycling order."""
    names = list(THEMES)
    try:
        idx = names.index(name.lower())
    except ValueError:
        return THEMES[DEFAULT_THEME]
    return THEMES[names[(idx + 1) % len(names)]]
