from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps.auth import get_workspace, require_user
from ..schemas.lab import Consumable, ConsumableOut, QuantityAdjustment
from ..services.workspace import LabWorkspace

router = APIRouter(prefix="/api/v1/consumables", tags=["consumables"], dependencies=[Depends(require_user)])


def _out(item: Consumable) -> ConsumableOut:
    return ConsumableOut(**item.model_dump(), low_stock=item.is_low_stock)


@router.get("", response_model=list[ConsumableOut])
def api_list_consumables(workspace: LabWorkspace = Depends(get_workspace)):
    return [_out(item) for item in workspace.consumables]


@router.post("/{consumable_id}/adjust", response_model=ConsumableOut)
def api_adjust_consumable(
    consumable_id: str, payload: QuantityAdjustment, workspace: LabWorkspace = Depends(get_workspace)
):
    """Add (positive delta) or use up (negative delta) stock; never drops below zero."""

    adjusted = workspace.adjust_consumable_quantity(consumable_id, payload.delta)
    if adjusted is None:
        raise HTTPException(status_code=404, detail="Consumable not found")
    return _out(adjusted)
