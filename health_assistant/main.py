from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from health_assistant.routes import api
from health_assistant.services.call_log import InMemoryCallLog
from health_assistant.services.llm_service import GeminiCompletionClient
from health_assistant.services.pipeline import VoicePipeline
from health_assistant.services.stt_service import AssemblyAITranscriber
from health_assistant.services.tts_service import MurfSpeechClient
from health_assistant.utils.logger import setup_logger

logger = setup_logger()


def build_pipeline(http_client: httpx.AsyncClient) -> VoicePipeline:
    return VoicePipeline(
        transcriber=AssemblyAITranscriber(),
        completion=GeminiCompletionClient(),
        synthesizer=MurfSpeechClient(http_client),
        call_log=InMemoryCallLog(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with httpx.AsyncClient() as http_client:
        app.state.pipeline = build_pipeline(http_client)
        logger.info("Voice pipeline ready")
        yield
    logger.info("Voice pipeline stopped")


app = FastAPI(title="AI Health Assistant", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["X-Transcript", "X-Response"],
)

app.include_router(api.router, tags=["Voice"])
