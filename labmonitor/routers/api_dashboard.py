"""Dashboard listing with filters and selection kept in the browser session."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request

from ..deps.auth import get_workspace, require_roles, require_user
from ..schemas.lab import StatusUpdate, UserRole
from ..services.catalog import SortKey
from ..services.dashboard import SESSION_KEY, DashboardView
from ..services.workspace import LabWorkspace

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"], dependencies=[Depends(require_user)])


def _load_view(request: Request) -> DashboardView:
    return DashboardView.from_session(request.session.get(SESSION_KEY))


def _respond(request: Request, view: DashboardView, workspace: LabWorkspace) -> dict[str, Any]:
    snapshot = view.snapshot(workspace.instruments)
    request.session[SESSION_KEY] = view.to_session()
    return snapshot.as_dict()


@router.get("")
def api_dashboard(
    request: Request,
    search: Optional[str] = None,
    status: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: Optional[SortKey] = Query(default=None, alias="sortBy"),
    workspace: LabWorkspace = Depends(get_workspace),
):
    """Filtered, sorted instrument cards. Omitted parameters keep their stored value."""

    view = _load_view(request)
    view.update_filters(search=search, status=status, location=location, sort_by=sort_by)
    return _respond(request, view, workspace)


@router.post("/reset")
def api_reset_dashboard(request: Request, workspace: LabWorkspace = Depends(get_workspace)):
    view = _load_view(request)
    view.reset()
    return _respond(request, view, workspace)


@router.post("/selection/toggle-all")
def api_toggle_all(request: Request, workspace: LabWorkspace = Depends(get_workspace)):
    view = _load_view(request)
    view.toggle_all(workspace.instruments)
    return _respond(request, view, workspace)


@router.post("/selection/{instrument_id}/toggle")
def api_toggle_selection(
    instrument_id: str, request: Request, workspace: LabWorkspace = Depends(get_workspace)
):
    view = _load_view(request)
    view.selection.toggle(instrument_id)
    return _respond(request, view, workspace)


@router.delete("/selection")
def api_clear_selection(request: Request, workspace: LabWorkspace = Depends(get_workspace)):
    view = _load_view(request)
    view.selection.clear()
    return _respond(request, view, workspace)


@router.post("/bulk-status", dependencies=[Depends(require_roles(UserRole.ADMIN))])
def api_bulk_status_selected(
    payload: StatusUpdate, request: Request, workspace: LabWorkspace = Depends(get_workspace)
):
    """Set the status of every selected (and visible) instrument, then clear the selection."""

    view = _load_view(request)
    visible_ids = [inst.id for inst in view.visible(workspace.instruments)]
    view.selection.prune(visible_ids)
    workspace.bulk_update_status(view.selection.ids, payload.status)
    view.selection.clear()
    return _respond(request, view, workspace)
