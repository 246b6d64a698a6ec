from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.permissions import SERVICE_LOGGERS
from ..deps.auth import get_workspace, require_roles, require_user
from ..schemas.lab import MaintenanceLog, MaintenanceLogCreate
from ..services.workspace import LabWorkspace

router = APIRouter(prefix="/api/v1/maintenance", tags=["maintenance"], dependencies=[Depends(require_user)])


@router.get("", response_model=list[MaintenanceLog])
def api_list_logs(instrument_id: Optional[str] = None, workspace: LabWorkspace = Depends(get_workspace)):
    logs = workspace.logs
    if instrument_id:
        logs = [log for log in logs if log.instrument_id == instrument_id]
    return sorted(logs, key=lambda log: log.date, reverse=True)


@router.post(
    "",
    response_model=MaintenanceLog,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*SERVICE_LOGGERS))],
)
def api_create_log(payload: MaintenanceLogCreate, workspace: LabWorkspace = Depends(get_workspace)):
    if workspace.find_instrument(payload.instrument_id) is None:
        raise HTTPException(status_code=404, detail="Instrument not found")
    return workspace.add_maintenance_log(payload)
