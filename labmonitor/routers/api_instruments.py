from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..deps.auth import get_workspace, require_roles, require_user
from ..schemas.lab import BulkStatusUpdate, Instrument, InstrumentCreate, UserRole
from ..services.qr import find_scanned_instrument, render_instrument_qr_png
from ..services.workspace import LabWorkspace

router = APIRouter(prefix="/api/v1/instruments", tags=["instruments"], dependencies=[Depends(require_user)])

manage_instruments = require_roles(UserRole.ADMIN)


def _get_or_404(workspace: LabWorkspace, instrument_id: str) -> Instrument:
    instrument = workspace.find_instrument(instrument_id)
    if instrument is None:
        raise HTTPException(status_code=404, detail="Instrument not found")
    return instrument


@router.get("", response_model=list[Instrument])
def api_list_instruments(workspace: LabWorkspace = Depends(get_workspace)):
    return workspace.instruments


@router.post(
    "",
    response_model=Instrument,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(manage_instruments)],
)
def api_create_instrument(payload: InstrumentCreate, workspace: LabWorkspace = Depends(get_workspace)):
    return workspace.add_instrument(payload)


@router.post("/bulk-status", response_model=list[Instrument], dependencies=[Depends(manage_instruments)])
def api_bulk_status(payload: BulkStatusUpdate, workspace: LabWorkspace = Depends(get_workspace)):
    return workspace.bulk_update_status(payload.instrument_ids, payload.status)


@router.get("/scan/{payload}", response_model=Instrument)
def api_scan_instrument(payload: str, workspace: LabWorkspace = Depends(get_workspace)):
    """Look up the instrument a scanned QR code refers to."""

    instrument = find_scanned_instrument(workspace.instruments, payload)
    if instrument is None:
        raise HTTPException(status_code=404, detail="Instrument not found for scanned code")
    return instrument


@router.get("/{instrument_id}", response_model=Instrument)
def api_get_instrument(instrument_id: str, workspace: LabWorkspace = Depends(get_workspace)):
    return _get_or_404(workspace, instrument_id)


@router.put("/{instrument_id}", response_model=Instrument, dependencies=[Depends(manage_instruments)])
def api_replace_instrument(
    instrument_id: str, payload: InstrumentCreate, workspace: LabWorkspace = Depends(get_workspace)
):
    instrument = Instrument(id=instrument_id, **payload.model_dump())
    if not workspace.update_instrument(instrument):
        raise HTTPException(status_code=404, detail="Instrument not found")
    return instrument


@router.delete(
    "/{instrument_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(manage_instruments)],
)
def api_delete_instrument(instrument_id: str, workspace: LabWorkspace = Depends(get_workspace)):
    if not workspace.delete_instrument(instrument_id):
        raise HTTPException(status_code=404, detail="Instrument not found")


@router.get("/{instrument_id}/qr.png", response_class=Response)
def api_instrument_qr(instrument_id: str, workspace: LabWorkspace = Depends(get_workspace)):
    instrument = _get_or_404(workspace, instrument_id)
    png = render_instrument_qr_png(instrument.id)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="{instrument.id}.png"'},
    )
