import os
from dotenv import load_dotenv

load_dotenv()

ASSEMBLYAI_API_KEY = os.getenv("AssemblyAI_API_KEY")
GEMINI_API_KEY = os.getenv("Gemini_API_KEY")
MURF_API_KEY = os.getenv("MURF_API_KEY")

STT_MODEL = os.getenv("STT_MODEL", "best")
STT_TIMEOUT = float(os.getenv("STT_TIMEOUT", "60"))

LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "1"))
LLM_MAX_OUTPUT_TOKENS = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "1024"))
LLM_TOP_P = float(os.getenv("LLM_TOP_P", "1"))
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))

TTS_URL = os.getenv("TTS_URL", "https://api.murf.ai/v1/speech/stream")
TTS_VOICE_ID = os.getenv("TTS_VOICE_ID", "en-US-natalie")
TTS_VOICE_STYLE = os.getenv("TTS_VOICE_STYLE", "Conversational")
TTS_SAMPLE_RATE = int(os.getenv("TTS_SAMPLE_RATE", "24000"))
TTS_TIMEOUT = float(os.getenv("TTS_TIMEOUT", "30"))

CALL_LOG_MAX_RECORDS = int(os.getenv("CALL_LOG_MAX_RECORDS", "1000"))
DEFAULT_CALLER = os.getenv("DEFAULT_CALLER", "Anonymous")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
