from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from urllib.parse import quote
import logging

from health_assistant.services.errors import PipelineError, ValidationError
from health_assistant.services.pipeline import VoicePipeline

router = APIRouter()
logger = logging.getLogger("chatbot")

# same characters encodeURIComponent leaves alone, so the browser can decodeURIComponent
HEADER_SAFE_CHARS = "-_.!~*'()"


def encode_header(text: str) -> str:
    return quote(text, safe=HEADER_SAFE_CHARS)


async def read_form(request: Request):
    """Parse the request body as a form; a malformed body is a ``ValidationError``."""
    try:
        return await request.form()
    except (HTTPException, MultiPartException, KeyError, ValueError) as e:
        logger.warning(f"Unreadable form body: {e}")
        raise ValidationError(str(e)) from e


def get_pipeline(request: Request) -> VoicePipeline:
    return request.app.state.pipeline


@router.post("/api")
async def voice_chat(request: Request, pipeline: VoicePipeline = Depends(get_pipeline)):
    try:
        form = await read_form(request)
        result = await pipeline.handle_form(form)
    except PipelineError as e:
        return PlainTextResponse(e.detail, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Error in voice_chat: {e}")
        return PlainTextResponse("Internal error", status_code=500)

    return StreamingResponse(
        result.audio.iter_bytes(),
        media_type=result.audio.media_type,
        headers={
            "X-Transcript": encode_header(result.transcript),
            "X-Response": encode_header(result.reply),
        },
        background=BackgroundTask(result.audio.aclose),
    )


@router.get("/api")
async def list_calls(pipeline: VoicePipeline = Depends(get_pipeline)):
    records = pipeline.call_log.list_all()
    return JSONResponse(content=[record.model_dump(mode="json") for record in records])
