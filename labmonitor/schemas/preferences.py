from __future__ import annotations

from pydantic import BaseModel

from .lab import Theme


class ThemeOut(BaseModel):
    theme: Theme


class ThemeUpdate(BaseModel):
    theme: Theme
