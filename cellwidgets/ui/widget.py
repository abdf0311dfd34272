"""Base widget: geometry, enabled/active flags and event routing.

Parents own their children. A child only keeps a weak reference back to its
parent, so tearing down a menu or window releases the whole subtree.

The root of a tree is attached to an application with ``set_application``;
every widget reaches the screen and theme through it while drawing and must
not keep them between draw calls.
"""

from __future__ import annotations

import weakref
from typing import Any, List, Optional

from cellwidgets.domain.events import (
    KB_BACKTAB,
    KB_TAB,
    InputEvent,
    KeypressEvent,
    MouseEvent,
    MouseKind,
)
from cellwidgets.ui.screen import Screen
from cellwidgets.ui.theme import ColorTheme


class Widget:
    def __init__(
        self,
        parent: Optional[Widget] = None,
        x: int = 0,
        y: int = 0,
        width: int = 0,
        height: int = 0,
    ) -> None:
        self._parent_ref: Optional[weakref.ReferenceType[Widget]] = None
        self._application_ref: Optional[weakref.ReferenceType[Any]] = None
        self.children: List[Widget] = []
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.active = False
        self._enabled = True
        if parent is not None:
            parent.add_child(self)

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional[Widget]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def add_child(self, child: Widget) -> None:
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        if child.enabled and self.active_child is None:
            child.active = True

    def remove_child(self, child: Widget) -> None:
        self.children.remove(child)
        child._parent_ref = None
        if child.active:
            child.active = False
            self.switch_widget(forward=True)

    def set_application(self, application: Any) -> None:
        self._application_ref = weakref.ref(application)

    def get_application(self) -> Any:
        widget: Widget = self
        while widget.parent is not None:
            widget = widget.parent
        application = widget._application_ref() if widget._application_ref else None
        if application is None:
            raise RuntimeError("Widget is not attached to an application")
        return application

    def get_screen(self) -> Screen:
        return self.get_application().backend.screen

    def get_theme(self) -> ColorTheme:
        return self.get_application().theme

    # ------------------------------------------------------------------
    # Flags and geometry
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)
        if not self._enabled and self.active:
            self.active = False
            parent = self.parent
            if parent is not None:
                parent.switch_widget(forward=True)

    def set_enabled(self, value: bool) -> None:
        self.enabled = value

    def is_absolute_active(self) -> bool:
        """Active here and in every ancestor."""
        if not self.active:
            return False
        parent = self.parent
        return parent is None or parent.is_absolute_active()

    @property
    def absolute_x(self) -> int:
        parent = self.parent
        return self.x + (parent.absolute_x if parent is not None else 0)

    @property
    def absolute_y(self) -> int:
        parent = self.parent
        return self.y + (parent.absolute_y if parent is not None else 0)

    def contains(self, x: int, y: int) -> bool:
        """True if (x, y) in the parent's frame falls inside this widget."""
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def child_at(self, x: int, y: int) -> Optional[Widget]:
        # Last child is drawn on top
        for child in reversed(self.children):
            if child.contains(x, y):
                return child
        return None

    @property
    def active_child(self) -> Optional[Widget]:
        for child in self.children:
            if child.active:
                return child
        return None

    def activate(self, child: Widget) -> None:
        if not child.enabled:
            return
        for other in self.children:
            other.active = other is child

    def switch_widget(self, forward: bool = True) -> None:
        """Move focus to the next (or previous) enabled child, wrapping around."""
        if not self.children:
            return
        current = self.active_child
        start = self.children.index(current) if current is not None else -1
        count = len(self.children)
        step = 1 if forward else -1
        for offset in range(1, count + 1):
            candidate = self.children[(start + step * offset) % count]
            if candidate.enabled:
                self.activate(candidate)
                return

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self) -> None:
        """Draw this widget in its own frame. Default draws nothing."""

    def render(self) -> None:
        """Draw this widget and then its children, each in its own frame."""
        screen = self.get_screen()
        screen.set_frame(self.absolute_x, self.absolute_y, self.width, self.height)
        self.draw()
        for child in self.children:
            child.render()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle_event(self, event: InputEvent) -> None:
        if isinstance(event, KeypressEvent):
            self.on_keypress(event)
        elif isinstance(event, MouseEvent):
            if event.kind is MouseKind.DOWN:
                self.on_mouse_down(event)
            elif event.kind is MouseKind.UP:
                self.on_mouse_up(event)
            else:
                self.on_mouse_motion(event)

    def on_keypress(self, event: KeypressEvent) -> None:
        if event.key == KB_TAB:
            self.switch_widget(forward=True)
            return
        if event.key == KB_BACKTAB:
            self.switch_widget(forward=False)
            return
        child = self.active_child
        if child is not None:
            child.on_keypress(event)

    def on_mouse_down(self, event: MouseEvent) -> None:
        child = self.child_at(event.x, event.y)
        if child is not None:
            self.activate(child)
            child.on_mouse_down(event.translate(child.x, child.y))

    def on_mouse_up(self, event: MouseEvent) -> None:
        child = self.child_at(event.x, event.y)
        if child is not None:
            child.on_mouse_up(event.translate(child.x, child.y))

    def on_mouse_motion(self, event: MouseEvent) -> None:
        child = self.child_at(event.x, event.y)
        if child is not None:
            child.on_mouse_motion(event.translate(child.x, child.y))
