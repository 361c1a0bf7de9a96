"""
Application controller: the global phase state machine.

Phases:

    SelectingContext --pick--> SelectingService(context) --pick-->
    ActiveService(context, service_id, instance)

Closing or failing a service returns to SelectingService.  Back from
SelectingService returns to SelectingContext.  The process exits only on
the quit key.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from rich.console import RenderableType

from lazycloud.core.handled import Handled, Ignored, Produced
from lazycloud.core.registry import Context, ServiceEnv, ServiceId, ServiceRegistry
from lazycloud.core.roles import Area, Binding, Frame
from lazycloud.core.service import ResultKind, ServiceInstance, ServiceResult
from lazycloud.events import Event, KeyEvent, Resize, Tick
from lazycloud.exceptions import ServiceError, UnknownServiceError
from lazycloud.keymap import GlobalAction
from lazycloud.theme import Theme
from lazycloud.views.dialogs import ErrorDialog, HelpOverlay
from lazycloud.views.selectors import ContextSelector, ServiceSelector
from lazycloud.views.status import command_status, render_footer, render_header
from lazycloud.views.widgets import Spinner

logger = logging.getLogger(__name__)


class ControllerEffect(Enum):
    """What the host should do after an event."""

    NONE = "none"
    REDRAW = "redraw"
    QUIT = "quit"
    NEXT_THEME = "next_theme"


@dataclass(frozen=True)
class SelectingContext:
    pass


@dataclass(frozen=True)
class SelectingService:
    context: Context


@dataclass(frozen=True)
class ActiveService:
    context: Context
    service_id: ServiceId
    instance: ServiceInstance = field(compare=False)


Phase = Union[SelectingContext, SelectingService, ActiveService]

SELECTOR_BINDINGS = (Binding("/", "filter", "Filter"), Binding("enter", "select", "Select"))


class AppController:
    """Routes events to the current phase and owns phase transitions."""

    def __init__(
        self,
        registry: ServiceRegistry,
        contexts: Sequence[Context],
        env: ServiceEnv | None = None,
    ) -> None:
        self.registry = registry
        self.env = env or ServiceEnv()
        self.keys = self.env.keys
        self.phase: Phase = SelectingContext()
        self.context_selector = ContextSelector(contexts, self.keys)
        self.service_selector: ServiceSelector | None = None
        self.dialog: ErrorDialog | HelpOverlay | None = None
        self._spinner = Spinner()

    # -- state -------------------------------------------------------------

    @property
    def context(self) -> Context | None:
        if isinstance(self.phase, SelectingContext):
            return None
        return self.phase.context

    @property
    def instance(self) -> ServiceInstance | None:
        if isinstance(self.phase, ActiveService):
            return self.phase.instance
        return None

    # -- events ------------------------------------------------------------

    def handle(self, event: Event) -> ControllerEffect:
        if isinstance(event, Tick):
            return self.tick()
        if isinstance(event, Resize):
            return ControllerEffect.REDRAW

        if self.dialog is not None:
            self.dialog.handle_key(event)
            if self.dialog.closed:
                self.dialog = None
            return ControllerEffect.REDRAW

        if self._route(event):
            return ControllerEffect.REDRAW
        return self._global_key(event)

    def _route(self, key: KeyEvent) -> bool:
        """Give the key to the current phase; False if nobody wanted it."""
        phase = self.phase
        if isinstance(phase, SelectingContext):
            result: Handled = self.context_selector.handle_key(key)
            if isinstance(result, Produced):
                self.select_context(result.value)
            return not isinstance(result, Ignored)

        if isinstance(phase, SelectingService):
            result = self._selector().handle_key(key)
            if isinstance(result, Produced):
                self.activate(result.value)
                return True
            if isinstance(result, Ignored) and self.keys.matches(key, GlobalAction.BACK):
                logger.info("Back to context selection")
                self.phase = SelectingContext()
                self.service_selector = None
                return True
            return not isinstance(result, Ignored)

        service_result = phase.instance.handle_event(key)
        self._apply(service_result)
        return service_result.kind is not ResultKind.IGNORED

    def _global_key(self, key: KeyEvent) -> ControllerEffect:
        if self.keys.matches(key, GlobalAction.QUIT):
            return ControllerEffect.QUIT
        if self.keys.matches(key, GlobalAction.HELP):
            self.dialog = HelpOverlay(self._bindings(), self.keys)
            return ControllerEffect.REDRAW
        if self.keys.matches(key, GlobalAction.THEME):
            return ControllerEffect.NEXT_THEME
        return ControllerEffect.NONE

    def tick(self) -> ControllerEffect:
        if self.env.dispatcher.tracker.running:
            self._spinner.on_tick()
        instance = self.instance
        if instance is not None:
            self._apply(instance.on_tick())
        return ControllerEffect.REDRAW

    # -- transitions -------------------------------------------------------

    def select_context(self, context: Context) -> None:
        logger.info("Selected context %s", context.label)
        providers = self.registry.available_services(context)
        self.service_selector = ServiceSelector(context, providers, self.keys)
        self.phase = SelectingService(context)

    def activate(self, service_id: ServiceId) -> bool:
        """Start ``service_id`` in the current context; errors keep the selector."""
        phase = self.phase
        if not isinstance(phase, SelectingService):
            return False
        try:
            instance = self.registry.instantiate(service_id, phase.context, self.env)
            instance.mount()
        except Exception as exc:
            logger.exception("Failed to start %s", service_id)
            self.dialog = ErrorDialog(f"Could not start {service_id}: {exc}", keys=self.keys)
            return False
        logger.info("Activated %s in %s", service_id, phase.context.label)
        self.phase = ActiveService(phase.context, service_id, instance)
        return True

    def _apply(self, result: ServiceResult) -> None:
        phase = self.phase
        if not isinstance(phase, ActiveService):
            return
        if result.kind is ResultKind.CLOSE:
            logger.info("Closed %s", phase.service_id)
            self._close(phase)
        elif result.is_error:
            logger.error("Service %s failed: %s", phase.service_id, result.message)
            self._close(phase)
            self.dialog = ErrorDialog(
                result.message or "Unknown error",
                title=f"{phase.service_id} failed",
                keys=self.keys,
            )

    def _selector(self) -> ServiceSelector:
        if self.service_selector is None:
            raise ServiceError("No service selector while selecting a service")
        return self.service_selector

    def _close(self, phase: ActiveService) -> None:
        phase.instance.unmount()
        self.phase = SelectingService(phase.context)
        if self.service_selector is None or self.service_selector.context != phase.context:
            providers = self.registry.available_services(phase.context)
            self.service_selector = ServiceSelector(phase.context, providers, self.keys)

    def preselect(self, context_name: str, service: str | None = None) -> bool:
        """Jump straight to a context (and optionally a service) by name."""
        context = next((c for c in self.context_selector.contexts if c.name == context_name), None)
        if context is None:
            self.dialog = ErrorDialog(f"Unknown context: {context_name}", keys=self.keys)
            return False
        self.context_selector.focus(context)
        self.select_context(context)
        if service is None:
            return True
        try:
            provider = self.registry.find(service, context)
        except (UnknownServiceError, ValueError) as exc:
            self.dialog = ErrorDialog(str(exc), keys=self.keys)
            return False
        return self.activate(provider.service_id)

    def shutdown(self) -> None:
        instance = self.instance
        if instance is not None:
            instance.unmount()

    # -- rendering ---------------------------------------------------------

    def _bindings(self) -> list[Binding]:
        instance = self.instance
        if instance is not None:
            return instance.keybindings()
        return list(SELECTOR_BINDINGS)

    def render(self, area: Area, theme: Theme) -> Frame:
        body_area = area.shrink(rows=2)
        phase = self.phase
        breadcrumbs: list[str] = []
        overlay: RenderableType | None = None
        notice: RenderableType | None = None
        indicator: RenderableType | None = None

        if isinstance(phase, SelectingContext):
            body = self.context_selector.render(body_area, theme)
        elif isinstance(phase, SelectingService):
            body = self._selector().render(body_area, theme)
        else:
            layers = phase.instance.render(body_area, theme)
            body, overlay, notice, indicator = layers.body, layers.overlay, layers.notice, layers.indicator
            breadcrumbs = [phase.instance.logic.title, *phase.instance.breadcrumbs()]

        if self.dialog is not None:
            overlay = self.dialog.render(body_area, theme)

        status = command_status(self.env.dispatcher.tracker, self._spinner, theme)
        header = render_header(self.context, breadcrumbs, status, theme)
        footer = render_footer(notice, self._bindings(), theme, indicator)
        return Frame(header=header, body=body, footer=footer, overlay=overlay)
