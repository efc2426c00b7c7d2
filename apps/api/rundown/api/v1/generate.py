from typing import Optional
import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from rundown.api.deps import get_gemini_rest_client
from rundown.services.llm.gemini_rest import GeminiAPIError, GeminiRestClient
from rundown.utils.http import read_json_body

router = APIRouter(tags=["generate"])


@router.post("/generate")
async def generate(request: Request, gemini: Optional[GeminiRestClient] = Depends(get_gemini_rest_client)):
    body = await read_json_body(request)
    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not prompt:
        return JSONResponse(status_code=400, content={"error": "Missing prompt"})

    if gemini is None:
        return JSONResponse(status_code=500, content={"error": "Gemini token not configured"})

    try:
        return await gemini.generate_content(str(prompt))
    except GeminiAPIError as e:
        logger.error("Gemini error status={}: {}", e.status_code, e.message)
        return JSONResponse(status_code=500, content={"error": e.message})
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Error contacting Gemini: {}", e)
        return JSONResponse(status_code=500, content={"error": "Failed to generate summary"})
