"""Import, export and clear endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.deps import get_controller
from src.schemas.insight import Insight
from src.services.controller import InsightController, decode_import
from src.services.errors import ImportFormatError

router = APIRouter(prefix="/api/v1/users/{user_id}/data", tags=["data"])


@router.get("/export")
def export_insights(controller: InsightController = Depends(get_controller)) -> list[dict[str, Any]]:
    """Export every insight as a JSON array."""
    return controller.export()


@router.post("/import", response_model=list[Insight])
async def import_insights(
    request: Request,
    confirm: bool = False,
    controller: InsightController = Depends(get_controller),
) -> list[Insight]:
    """Replace the whole collection with an exported file.

    Destructive, so ``confirm=true`` is required. An invalid file leaves the
    current collection untouched. A body that is not JSON at all is reported
    as an invalid file too.
    """
    if not confirm:
        raise HTTPException(
            status_code=400, detail="Import replaces all insights; pass confirm=true"
        )
    try:
        return controller.import_insights(decode_import(await request.body()))
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=f"Invalid file format: {e}")


@router.delete("", status_code=204)
def clear_insights(
    confirm: bool = False, controller: InsightController = Depends(get_controller)
) -> None:
    """Delete every insight of the user."""
    if not confirm:
        raise HTTPException(
            status_code=400, detail="Clearing deletes all insights; pass confirm=true"
        )
    controller.clear()
