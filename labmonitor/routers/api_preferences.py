from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps.auth import get_theme, require_user
from ..schemas.preferences import ThemeOut, ThemeUpdate
from ..services.theme import ThemeController

router = APIRouter(prefix="/api/v1/preferences", tags=["preferences"], dependencies=[Depends(require_user)])


@router.get("/theme", response_model=ThemeOut)
def api_get_theme(theme: ThemeController = Depends(get_theme)):
    return ThemeOut(theme=theme.get())


@router.put("/theme", response_model=ThemeOut)
def api_set_theme(payload: ThemeUpdate, theme: ThemeController = Depends(get_theme)):
    return ThemeOut(theme=theme.set(payload.theme))


@router.post("/theme/toggle", response_model=ThemeOut)
def api_toggle_theme(theme: ThemeController = Depends(get_theme)):
    return ThemeOut(theme=theme.toggle())
