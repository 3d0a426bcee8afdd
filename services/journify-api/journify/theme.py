from __future__ import annotations

from collections.abc import Callable

ThemeListener = Callable[[bool], None]


class ThemeState:
    """Light/dark flag with subscribers notified on every toggle."""

    def __init__(self, dark_mode: bool = False):
        self.is_dark_mode = dark_mode
        self._listeners: list[ThemeListener] = []

    @property
    def theme_class(self) -> str:
        return "dark-theme" if self.is_dark_mode else "light-theme"

    def subscribe(self, listener: ThemeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def toggle(self) -> bool:
        self.is_dark_mode = not self.is_dark_mode
        for listener in list(self._listeners):
            listener(self.is_dark_mode)
        return self.is_dark_mode
