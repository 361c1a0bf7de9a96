"""
Service instance framework.

A ``ServiceInstance`` owns the page stack, the overlay slot, the message
channel and the outstanding commands of one running service.  What the
service actually does lives in a ``ServiceLogic``: its root page, the
messages queued on mount, and one handler per message type.

Input never mutates business state directly.  Pages and overlays turn keys
into messages, messages wait in the channel, and the next tick drains them
through the handlers.  Handlers answer with effects that the instance
applies in order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, Union

from rich.console import RenderableType
from rich.text import Text

from lazycloud.constants import NOTICE_TICKS
from lazycloud.core.channel import MessageChannel
from lazycloud.core.commands import Command, CommandDispatcher, CommandFailed, CommandHandle
from lazycloud.core.handled import CONSUMED, Ignored, Produced
from lazycloud.core.roles import Area, Binding, Layers, Overlay, Page, tick, visible_bindings
from lazycloud.events import Event, KeyEvent
from lazycloud.keymap import GlobalAction, KeyResolver
from lazycloud.theme import Theme
from lazycloud.views.widgets import Spinner

if TYPE_CHECKING:
    from lazycloud.core.registry import Context, ServiceId

logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


class ResultKind(Enum):
    HANDLED = "handled"
    IGNORED = "ignored"
    CLOSE = "close"
    ERROR = "error"


@dataclass(frozen=True)
class ServiceResult:
    """What the controller learns from one call into an instance."""

    kind: ResultKind
    message: str | None = None

    HANDLED: ClassVar[ServiceResult]
    IGNORED: ClassVar[ServiceResult]
    CLOSE: ClassVar[ServiceResult]

    @classmethod
    def error(cls, message: str) -> ServiceResult:
        return cls(ResultKind.ERROR, message)

    @property
    def is_error(self) -> bool:
        return self.kind is ResultKind.ERROR


ServiceResult.HANDLED = ServiceResult(ResultKind.HANDLED)
ServiceResult.IGNORED = ServiceResult(ResultKind.IGNORED)
ServiceResult.CLOSE = ServiceResult(ResultKind.CLOSE)


# =============================================================================
# Effects returned by message handlers
# =============================================================================


@dataclass(frozen=True)
class Spawn:
    command: Command


@dataclass(frozen=True)
class PushPage:
    page: Page


@dataclass(frozen=True)
class PopPage:
    pass


@dataclass(frozen=True)
class ReplacePage:
    page: Page


@dataclass(frozen=True)
class ShowOverlay:
    overlay: Overlay


@dataclass(frozen=True)
class DismissOverlay:
    pass


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notify:
    text: str
    level: NoticeLevel = NoticeLevel.INFO


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class Fail:
    text: str


Effect = Union[Spawn, PushPage, PopPage, ReplacePage, ShowOverlay, DismissOverlay, Notify, Close, Fail]

# A handler may return one effect, a list of them, or None for "no effects".
UpdateResult = Union[Effect, list[Effect], None]

Handler = Callable[[Any], UpdateResult]


@dataclass
class Notice:
    """Transient status line message, cleared after a number of ticks."""

    text: str
    level: NoticeLevel = NoticeLevel.INFO
    ticks_left: int = NOTICE_TICKS


# =============================================================================
# Service logic
# =============================================================================


class ServiceLogic(Protocol):
    """The service-specific half of a running service."""

    title: str

    def root_page(self) -> Page:
        """The page shown when the service opens."""
        ...

    def initial_messages(self) -> Iterable[Any]:
        """Messages queued on mount (typically a first load)."""
        ...

    def handlers(self) -> Mapping[type, Handler]:
        """Message type -> handler."""
        ...

    def bind(self, stack: PageStackView) -> None:
        """Receive a read-only view of the instance's page stack."""
        ...

    def on_unmount(self) -> None:
        ...


class PageStackView:
    """Read-only view of an instance's page stack."""

    __slots__ = ("_pages",)

    def __init__(self, pages: list[Page]) -> None:
        self._pages = pages

    @property
    def top(self) -> Page:
        return self._pages[-1]

    def __contains__(self, page: object) -> bool:
        return any(p is page for p in self._pages)

    def __len__(self) -> int:
        return len(self._pages)


# =============================================================================
# Instance
# =============================================================================


class ServiceInstance:
    """Framework-managed container for one running service."""

    def __init__(
        self,
        service_id: ServiceId,
        context: Context,
        logic: ServiceLogic,
        *,
        dispatcher: CommandDispatcher,
        keys: KeyResolver | None = None,
    ) -> None:
        self.service_id = service_id
        self.context = context
        self.logic = logic
        self._dispatcher = dispatcher
        self._keys = keys or KeyResolver()
        self._channel = MessageChannel()
        self.sender = self._channel.sender()
        self._handlers: dict[type, Handler] = dict(logic.handlers())
        self.page_stack: list[Page] = [logic.root_page()]
        self.overlay: Overlay | None = None
        self.outstanding: set[CommandHandle] = set()
        self.notice: Notice | None = None
        self.spinner = Spinner()
        self._mounted = False
        self._unmounted = False
        logic.bind(PageStackView(self.page_stack))

    # -- lifecycle ---------------------------------------------------------

    def mount(self) -> None:
        """Queue the initial messages.  Runs once and never blocks."""
        if self._mounted:
            return
        self._mounted = True
        for message in self.logic.initial_messages():
            self.sender.send(message)
        logger.info("Mounted %s for context %s", self.service_id, self.context.name)

    def unmount(self) -> None:
        """Close the channel and let the logic clean up.  Runs once."""
        if self._unmounted:
            return
        self._unmounted = True
        self._channel.close()
        self.overlay = None
        try:
            self.logic.on_unmount()
        except Exception:
            logger.exception("Unmount of %s failed", self.service_id)
        if self.outstanding:
            logger.debug("Detached %d running command(s) from %s", len(self.outstanding), self.service_id)
        self.outstanding.clear()
        logger.info("Unmounted %s", self.service_id)

    @property
    def alive(self) -> bool:
        return self._mounted and not self._unmounted

    # -- input -------------------------------------------------------------

    @property
    def top_page(self) -> Page:
        return self.page_stack[-1]

    def handle_event(self, event: Event) -> ServiceResult:
        """Route a key to the overlay or the top page."""
        if not isinstance(event, KeyEvent):
            return ServiceResult.IGNORED

        if self.overlay is not None:
            overlay = self.overlay
            self._route(overlay, event)
            if overlay.closed and self.overlay is overlay:
                self.overlay = None
            # The overlay owns every key while it is shown.
            return ServiceResult.HANDLED

        result = self._route(self.top_page, event)
        if isinstance(result, Ignored):
            if self._keys.matches(event, GlobalAction.BACK):
                return self._pop_page()
            return ServiceResult.IGNORED
        return ServiceResult.HANDLED

    def _route(self, target: Page | Overlay, key: KeyEvent) -> Any:
        try:
            result = target.handle_key(key)
        except Exception as exc:
            logger.exception("%s failed handling %s", type(target).__name__, key)
            self.notice = Notice(f"Error: {exc}", NoticeLevel.ERROR)
            return CONSUMED
        if isinstance(result, Produced):
            self.sender.send(result.value)
        return result

    # -- tick --------------------------------------------------------------

    def on_tick(self) -> ServiceResult:
        """Advance animations, then drain the channel through the handlers."""
        tick(self.top_page)
        if self.overlay is not None:
            tick(self.overlay)
        if self.notice is not None:
            self.notice.ticks_left -= 1
            if self.notice.ticks_left <= 0:
                self.notice = None

        self.outstanding = {h for h in self.outstanding if not h.done}
        if self.outstanding:
            self.spinner.on_tick()
        else:
            self.spinner.reset()

        handled = False
        for message in self._channel.drain():
            handled = True
            result = self._dispatch(message)
            if result is not None:
                return result
        return ServiceResult.HANDLED if handled else ServiceResult.IGNORED

    def _dispatch(self, message: Any) -> ServiceResult | None:
        handler = self._handler_for(type(message))
        if handler is None:
            if isinstance(message, CommandFailed):
                self.notice = Notice(f"{message.command} failed: {message.error}", NoticeLevel.ERROR)
                return None
            logger.error("%s has no handler for %s", self.service_id, type(message).__name__)
            return ServiceResult.error(f"Unhandled message: {type(message).__name__}")

        try:
            effects = handler(message)
            return self._apply(_as_list(effects))
        except Exception as exc:
            logger.exception("Handler for %s failed in %s", type(message).__name__, self.service_id)
            return ServiceResult.error(f"{type(message).__name__}: {exc}")

    def _handler_for(self, message_type: type) -> Handler | None:
        for cls in message_type.__mro__:
            handler = self._handlers.get(cls)
            if handler is not None:
                return handler
        return None

    def _apply(self, effects: list[Effect]) -> ServiceResult | None:
        for effect in effects:
            if isinstance(effect, Spawn):
                handle = self._dispatcher.spawn(effect.command, self.sender)
                self.outstanding.add(handle)
            elif isinstance(effect, PushPage):
                self.page_stack.append(effect.page)
            elif isinstance(effect, PopPage):
                if self._pop_page() is ServiceResult.CLOSE:
                    return ServiceResult.CLOSE
            elif isinstance(effect, ReplacePage):
                self.page_stack[-1] = effect.page
            elif isinstance(effect, ShowOverlay):
                self.overlay = effect.overlay
            elif isinstance(effect, DismissOverlay):
                self.overlay = None
            elif isinstance(effect, Notify):
                self.notice = Notice(effect.text, effect.level)
            elif isinstance(effect, Close):
                return ServiceResult.CLOSE
            elif isinstance(effect, Fail):
                return ServiceResult.error(effect.text)
            else:
                raise TypeError(f"Unknown effect: {effect!r}")
        return None

    def _pop_page(self) -> ServiceResult:
        if len(self.page_stack) == 1:
            return ServiceResult.CLOSE
        self.page_stack.pop()
        return ServiceResult.HANDLED

    # -- views -------------------------------------------------------------

    def breadcrumbs(self) -> list[str]:
        crumbs: list[str] = []
        for page in self.page_stack:
            crumbs.extend(page.breadcrumbs())
        return crumbs

    def keybindings(self) -> list[Binding]:
        """Bindings of whatever currently receives keys."""
        return visible_bindings(self.overlay if self.overlay is not None else self.top_page)

    @property
    def loading(self) -> bool:
        return bool(self.outstanding)

    def render(self, area: Area, theme: Theme) -> Layers:
        body = self.top_page.render(area, theme)
        overlay = self.overlay.render(area, theme) if self.overlay is not None else None
        indicator = self.spinner.render(area, theme) if self.outstanding else None
        notice = render_notice(self.notice, theme) if self.notice is not None else None
        return Layers(body, overlay, indicator, notice)


def render_notice(notice: Notice, theme: Theme) -> RenderableType:
    colors = {
        NoticeLevel.INFO: theme.info,
        NoticeLevel.SUCCESS: theme.success,
        NoticeLevel.WARNING: theme.warning,
        NoticeLevel.ERROR: theme.error,
    }
    return Text(notice.text, style=theme.style(colors[notice.level], bold=notice.level is NoticeLevel.ERROR))


def _as_list(effects: UpdateResult) -> list[Effect]:
    if effects is None:
        return []
    if isinstance(effects, list):
        return effects
    return [effects]
