from __future__ import annotations

from typing import Iterable


class SelectionModel:
    """Set of selected instrument ids, read against the currently visible list."""

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(ids)

    def __contains__(self, instrument_id: object) -> bool:
        return instrument_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def ids(self) -> list[str]:
        return sorted(self._ids)

    def toggle(self, instrument_id: str) -> None:
        if instrument_id in self._ids:
            self._ids.discard(instrument_id)
        else:
            self._ids.add(instrument_id)

    def select_all(self, visible_ids: Iterable[str]) -> None:
        """Replace the selection with exactly the visible ids."""
        self._ids = set(visible_ids)

    def clear(self) -> None:
        self._ids.clear()

    def toggle_all(self, visible_ids: Iterable[str]) -> None:
        """The select-all checkbox: clear when everything visible is selected."""
        visible = list(visible_ids)
        if self.all_selected(visible):
            self.clear()
        else:
            self.select_all(visible)

    def all_selected(self, visible_ids: Iterable[str]) -> bool:
        visible = set(visible_ids)
        return len(self._ids) > 0 and len(self._ids) == len(visible)

    def prune(self, visible_ids: Iterable[str]) -> None:
        """Drop ids that are no longer visible."""
        self._ids &= set(visible_ids)
