from typing import Optional
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from rundown.api.deps import get_summary_store
from rundown.db.summaries import SummaryStore
from rundown.schemas.summaries import SaveSummariesRequest
from rundown.utils.http import read_json_body

router = APIRouter(tags=["summaries"])


@router.get("/summaries")
async def get_summaries(date: Optional[str] = None, store: SummaryStore = Depends(get_summary_store)):
    if not date:
        return JSONResponse(status_code=400, content={"error": 'Missing required "date" query param'})

    try:
        summaries = await store.get_all_summaries_for_date(date)
    except Exception as e:
        logger.error("Error fetching summaries: {}", e)
        return JSONResponse(status_code=500, content={"error": "Could not fetch summaries"})

    return {
        system: [s.model_dump(by_alias=True) for s in repos]
        for system, repos in summaries.items()
    }


@router.post("/summaries", status_code=204)
async def post_summaries(request: Request, store: SummaryStore = Depends(get_summary_store)):
    """
    Expected body:
    {"system": "foo", "date": "2025-05-13", "summaries": [{"repoName": "repo-a", "summary": "..."}]}
    """
    body = await read_json_body(request)
    try:
        payload = SaveSummariesRequest.model_validate(body)
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "Invalid request format"})

    try:
        await store.save_summaries(payload.system, payload.date, payload.valid_summaries())
    except Exception as e:
        logger.error("Error saving summaries: {}", e)
        return JSONResponse(status_code=500, content={"error": "Could not save summaries"})

    return Response(status_code=204)
