from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Response
from fastapi.encoders import jsonable_encoder

from ..core.permissions import ADMIN_PAGE_VIEWERS
from ..deps.auth import get_workspace, require_roles
from ..services.analytics import calculate_lab_metrics
from ..services.reports import (
    MAINTENANCE_FILENAME,
    USAGE_FILENAME,
    generate_maintenance_report,
    generate_usage_report,
)
from ..services.workspace import LabWorkspace

router = APIRouter(
    prefix="/api/v1/reports",
    tags=["reports"],
    dependencies=[Depends(require_roles(*ADMIN_PAGE_VIEWERS))],
)


def _csv_download(text: str, filename: str) -> Response:
    return Response(
        content=text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/usage.csv", response_class=Response)
def api_usage_report(workspace: LabWorkspace = Depends(get_workspace)):
    return _csv_download(generate_usage_report(workspace.instruments, workspace.bookings), USAGE_FILENAME)


@router.get("/maintenance.csv", response_class=Response)
def api_maintenance_report(workspace: LabWorkspace = Depends(get_workspace)):
    return _csv_download(generate_maintenance_report(workspace.instruments, workspace.logs), MAINTENANCE_FILENAME)


@router.get("/analytics")
def api_analytics(workspace: LabWorkspace = Depends(get_workspace)):
    metrics = calculate_lab_metrics(workspace.instruments, workspace.bookings, workspace.logs)
    # Decimal totals go out as strings to keep the cents exact.
    return jsonable_encoder(metrics, custom_encoder={Decimal: str})
