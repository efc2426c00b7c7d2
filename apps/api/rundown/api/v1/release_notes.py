from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from rundown.api.deps import get_release_notes_service
from rundown.schemas.summaries import ReleaseNotesResponse
from rundown.services.summaries.release_notes import (
    ALL_SYSTEMS,
    ReleaseNotesError,
    ReleaseNotesService,
    export_filename,
    export_system,
    filter_summaries,
)
from rundown.utils.dates import today_iso

router = APIRouter(tags=["release-notes"])


@router.get("/release-notes", response_model=ReleaseNotesResponse)
async def get_release_notes(
    date: Optional[str] = None,
    system: str = ALL_SYSTEMS,
    repo: str = "",
    service: ReleaseNotesService = Depends(get_release_notes_service),
):
    day = date or today_iso()
    try:
        data = await service.load(day)
    except ReleaseNotesError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    return ReleaseNotesResponse(date=day, systems=filter_summaries(data, system, repo))


@router.post("/release-notes/refresh", response_model=ReleaseNotesResponse)
async def refresh_release_notes(
    date: Optional[str] = None,
    service: ReleaseNotesService = Depends(get_release_notes_service),
):
    day = date or today_iso()
    try:
        data = await service.refresh(day)
    except ReleaseNotesError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    return ReleaseNotesResponse(date=day, systems=filter_summaries(data))


@router.get("/release-notes/{system}/export")
async def export_release_notes(
    system: str,
    date: Optional[str] = None,
    service: ReleaseNotesService = Depends(get_release_notes_service),
):
    day = date or today_iso()
    try:
        data = await service.load(day)
    except ReleaseNotesError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})

    if system not in data:
        return JSONResponse(status_code=404, content={"error": f"Unknown system: {system}"})

    return PlainTextResponse(
        export_system(data, system),
        headers={"Content-Disposition": f'attachment; filename="{export_filename(system)}"'},
    )
