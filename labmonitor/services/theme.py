from __future__ import annotations

from ..schemas.lab import Theme
from .store import THEME_KEY, CollectionStore

DEFAULT_THEME = Theme.DARK


class ThemeController:
    """Stored colour-scheme preference; defaults to dark."""

    def __init__(self, store: CollectionStore) -> None:
        self._store = store

    def get(self) -> Theme:
        return self._store.load(THEME_KEY, DEFAULT_THEME, model=Theme)

    def set(self, theme: Theme) -> Theme:
        self._store.save(THEME_KEY, theme)
        return theme

    def toggle(self) -> Theme:
        current = self.get()
        return self.set(Theme.LIGHT if current is Theme.DARK else Theme.DARK)
