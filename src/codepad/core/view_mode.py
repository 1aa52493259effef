"""Viewport-driven layout state of the editor view."""

from typing import Any

from .models import LayoutMode, Panel

COMPACT_BREAKPOINT_PX = 768
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 24
FONT_STEP = 2
COMPACT_MIN_FONT_SIZE = 16


def layout_for_width(width: int, breakpoint: int = COMPACT_BREAKPOINT_PX) -> LayoutMode:
    """Map a viewport width to a layout mode."""
    return LayoutMode.COMPACT if width < breakpoint else LayoutMode.SPLIT


class ViewModeController:
    """Layout mode, compact panel choice, fullscreen flag and font size."""

    def __init__(
        self,
        width: int = 1024,
        breakpoint: int = COMPACT_BREAKPOINT_PX,
        font_size: int = 16,
    ):
        self.breakpoint = breakpoint
        self.width = width
        self.mode = layout_for_width(width, breakpoint)
        self.compact_panel = Panel.EDITOR
        self.fullscreen = False
        self.font_size = font_size

    @property
    def is_compact(self) -> bool:
        return self.mode == LayoutMode.COMPACT

    @property
    def shortcut_hints_visible(self) -> bool:
        return not self.is_compact

    def resize(self, width: int) -> LayoutMode:
        self.width = width
        self.mode = layout_for_width(width, self.breakpoint)
        return self.mode

    def visible_panels(self) -> tuple[Panel, ...]:
        if self.is_compact:
            return (self.compact_panel,)
        return (Panel.EDITOR, Panel.OUTPUT)

    def show_panel(self, panel: Panel) -> None:
        self.compact_panel = panel

    def toggle_panel(self) -> Panel:
        self.compact_panel = Panel.OUTPUT if self.compact_panel == Panel.EDITOR else Panel.EDITOR
        return self.compact_panel

    def toggle_fullscreen(self) -> bool:
        self.fullscreen = not self.fullscreen
        return self.fullscreen

    def increase_font(self) -> int:
        self.font_size = min(MAX_FONT_SIZE, self.font_size + FONT_STEP)
        return self.font_size

    def decrease_font(self) -> int:
        self.font_size = max(MIN_FONT_SIZE, self.font_size - FONT_STEP)
        return self.font_size

    def editor_options(self) -> dict[str, Any]:
        """Options handed to the editing widget for the current layout."""
        if self.is_compact:
            return {
                "fontSize": max(COMPACT_MIN_FONT_SIZE, self.font_size),
                "minimap": {"enabled": False},
                "lineNumbers": "off",
            }
        return {
            "fontSize": self.font_size,
            "minimap": {"enabled": True},
            "lineNumbers": "on",
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "width": self.width,
            "visible_panels": [panel.value for panel in self.visible_panels()],
            "fullscreen": self.fullscreen,
            "font_size": self.font_size,
            "shortcut_hints_visible": self.shortcut_hints_visible,
            "editor_options": self.editor_options(),
        }
