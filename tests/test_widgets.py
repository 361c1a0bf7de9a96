"""Tests for views/widgets.py - reusable elements."""

from dataclasses import dataclass

from lazycloud.core.handled import CONSUMED, IGNORED, Produced
from lazycloud.core.roles import Area, render_plain
from lazycloud.events import KeyEvent
from lazycloud.theme import MOCHA
from lazycloud.views.widgets import (
    Activated,
    Cancelled,
    Column,
    ConfirmPrompt,
    Confirmed,
    Highlighted,
    SelectList,
    Spinner,
    Submitted,
    Table,
    TextInput,
)

K = KeyEvent.parse
AREA = Area(80, 20)


@dataclass(frozen=True)
class Item:
    name: str
    kind: str = "x"

    def cells(self) -> tuple[str, ...]:
        return (self.name, self.kind)


def make_table(names: list[str]) -> Table[Item]:
    return Table((Column("Name"), Column("Kind")), [Item(n) for n in names], title="Items")


class TestTableNavigation:
    """Tests for Table selection and movement."""

    def test_down_highlights_next(self) -> None:
        """Test that moving the selection reports the new item."""
        table = make_table(["a", "b", "c"])

        result = table.handle_key(K("j"))

        assert result == Produced(Highlighted(1, Item("b")))
        assert table.selected == 1

    def test_up_at_top_is_consumed(self) -> None:
        """Test that a move that changes nothing is consumed silently."""
        table = make_table(["a", "b"])
        assert table.handle_key(K("k")) is CONSUMED
        assert table.selected == 0

    def test_home_end(self) -> None:
        table = make_table(["a", "b", "c", "d"])
        table.handle_key(K("G"))
        assert table.selected == 3
        table.handle_key(K("g"))
        assert table.selected == 0

    def test_page_down_clamps(self) -> None:
        table = make_table([str(i) for i in range(5)])
        table.handle_key(K("pagedown"))
        assert table.selected == 4

    def test_enter_activates(self) -> None:
        table = make_table(["a", "b"])
        table.select(1)
        assert table.handle_key(K("enter")) == Produced(Activated(1, Item("b")))

    def test_enter_on_empty_is_consumed(self) -> None:
        assert make_table([]).handle_key(K("enter")) is CONSUMED

    def test_unknown_key_is_ignored(self) -> None:
        """Test that page-level keys fall through."""
        assert make_table(["a"]).handle_key(K("n")) is IGNORED


class TestTableItems:
    """Tests for Table.set_items clamping."""

    def test_selection_clamped_when_rows_shrink(self) -> None:
        """Test that the selection stays in range after a reload."""
        table = make_table([str(i) for i in range(6)])
        table.select(5)

        table.set_items([Item("0"), Item("1"), Item("2")])

        assert table.selected == 2
        assert table.selected_item == Item("2")

    def test_empty_rows(self) -> None:
        table = make_table(["a"])
        table.set_items([])
        assert table.selected == 0
        assert table.selected_item is None


class TestTableFilter:
    """Tests for the / filter."""

    def type_query(self, table: Table, text: str) -> None:
        table.handle_key(K("/"))
        for ch in text:
            table.handle_key(KeyEvent(ch))

    def test_filter_narrows_rows(self) -> None:
        table = make_table(["db-password", "api-key", "db-user"])

        self.type_query(table, "dbu")

        assert [i.name for i in table.visible] == ["db-user"]
        assert table.filtering

    def test_enter_keeps_filter(self) -> None:
        table = make_table(["db-password", "api-key"])
        self.type_query(table, "api")

        table.handle_key(K("enter"))

        assert not table.filtering
        assert table.query == "api"
        assert [i.name for i in table.visible] == ["api-key"]

    def test_escape_clears_filter(self) -> None:
        table = make_table(["db-password", "api-key"])
        self.type_query(table, "api")

        table.handle_key(K("escape"))

        assert table.query == ""
        assert len(table.visible) == 2

    def test_escape_after_enter_clears_kept_filter(self) -> None:
        table = make_table(["db-password", "api-key"])
        self.type_query(table, "api")
        table.handle_key(K("enter"))

        assert table.handle_key(K("escape")) is CONSUMED
        assert table.query == ""

    def test_escape_without_filter_is_ignored(self) -> None:
        """Test that escape falls through to back navigation."""
        assert make_table(["a"]).handle_key(K("escape")) is IGNORED

    def test_backspace(self) -> None:
        table = make_table(["db-password", "api-key"])
        self.type_query(table, "apx")
        assert table.visible == []

        table.handle_key(K("backspace"))

        assert [i.name for i in table.visible] == ["api-key"]


class TestTableRender:
    """Tests for Table.render."""

    def test_render_shows_rows_and_count(self) -> None:
        text = render_plain(make_table(["alpha", "beta"]).render(AREA, MOCHA))
        assert "Items (2)" in text
        assert "alpha" in text and "beta" in text

    def test_render_empty_text(self) -> None:
        table = make_table([])
        table.empty_text = "Nothing here"
        assert "Nothing here" in render_plain(table.render(AREA, MOCHA))

    def test_render_is_pure(self) -> None:
        """Test that rendering twice gives identical output and state."""
        table = make_table(["a", "b", "c"])
        table.select(2)
        first = render_plain(table.render(AREA, MOCHA))
        second = render_plain(table.render(AREA, MOCHA))
        assert first == second
        assert table.selected == 2

    def test_window_keeps_selection_visible(self) -> None:
        table = make_table([str(i) for i in range(50)])
        table.select(40)
        start, end = table.window(10)
        assert start <= 40 < end


class TestSelectList:
    """Tests for SelectList."""

    def test_label_and_activation(self) -> None:
        lst = SelectList(["one", "two"], label=str.upper, title="Numbers")
        lst.handle_key(K("down"))

        assert lst.handle_key(K("enter")) == Produced(Activated(1, "two"))
        text = render_plain(lst.render(AREA, MOCHA))
        assert "▸ TWO" in text

    def test_filter_uses_label(self) -> None:
        lst = SelectList(["one", "two"], label=lambda s: f"item {s}")
        lst.handle_key(K("/"))
        for ch in "tw":
            lst.handle_key(KeyEvent(ch))
        assert lst.visible == ["two"]


class TestTextInput:
    """Tests for TextInput editing."""

    def type_text(self, field: TextInput, text: str) -> None:
        for ch in text:
            field.handle_key(KeyEvent(ch))

    def test_typing_and_submit(self) -> None:
        field = TextInput("Name")
        self.type_text(field, "abc")
        assert field.handle_key(K("enter")) == Produced(Submitted("abc"))

    def test_escape_cancels(self) -> None:
        assert TextInput().handle_key(K("escape")) == Produced(Cancelled())

    def test_cursor_editing(self) -> None:
        """Test insertion and deletion around the cursor."""
        field = TextInput()
        self.type_text(field, "ac")
        field.handle_key(K("left"))
        field.handle_key(KeyEvent("b"))
        assert field.value == "abc"

        field.handle_key(K("home"))
        field.handle_key(K("delete"))
        assert field.value == "bc"
        assert field.cursor == 0

        field.handle_key(K("end"))
        field.handle_key(K("backspace"))
        assert field.value == "b"

    def test_delete_word_and_line(self) -> None:
        field = TextInput(value="hello big world")
        field.handle_key(K("ctrl+w"))
        assert field.value == "hello big "

        field.handle_key(K("ctrl+u"))
        assert field.value == ""

    def test_space_inserts(self) -> None:
        field = TextInput()
        self.type_text(field, "a")
        field.handle_key(K("space"))
        self.type_text(field, "b")
        assert field.value == "a b"

    def test_unbound_key_ignored(self) -> None:
        assert TextInput().handle_key(K("f5")) is IGNORED

    def test_masked_render(self) -> None:
        field = TextInput("Secret", "hunter2", masked=True)
        text = render_plain(field.render(AREA, MOCHA))
        assert "hunter2" not in text
        assert "•" in text


class TestConfirmPrompt:
    """Tests for ConfirmPrompt."""

    def test_confirm_and_cancel(self) -> None:
        prompt = ConfirmPrompt("Sure?")
        assert prompt.handle_key(K("y")) == Produced(Confirmed())
        assert prompt.handle_key(K("n")) == Produced(Cancelled())
        assert prompt.handle_key(K("escape")) == Produced(Cancelled())

    def test_other_keys_ignored(self) -> None:
        assert ConfirmPrompt("Sure?").handle_key(K("x")) is IGNORED

    def test_render(self) -> None:
        text = render_plain(ConfirmPrompt("Delete it?", title="Delete", danger=True).render(AREA, MOCHA))
        assert "Delete it?" in text
        assert "Yes" in text and "No" in text


class TestSpinner:
    """Tests for Spinner."""

    def test_advances_and_wraps(self) -> None:
        spinner = Spinner()
        for _ in range(len(Spinner.FRAMES) + 1):
            spinner.on_tick()
        assert spinner.frame == 1

    def test_reset(self) -> None:
        spinner = Spinner("Working")
        spinner.on_tick()
        spinner.reset()
        assert spinner.frame == 0
        assert "Working" in render_plain(spinner.render(AREA, MOCHA))
