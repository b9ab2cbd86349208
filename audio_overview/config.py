"""Centralized configuration for the audio overview pipeline."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

# --- Model Configuration ---
LLM_BASE_URL = os.environ.get(
    "LLM_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"
)
LLM_API_KEY = os.environ.get("LLM_API_KEY", os.environ.get("GEMINI_API_KEY", ""))
FAST_MODEL = os.environ.get("FAST_MODEL_NAME", "gemini-2.5-flash")
CREATIVE_MODEL = os.environ.get("CREATIVE_MODEL_NAME", "gemini-3-pro-preview")
TTS_MODEL = os.environ.get("TTS_MODEL_NAME", "gemini-2.5-flash-preview-tts")
IMAGE_MODEL = os.environ.get("IMAGE_MODEL_NAME", "gemini-2.5-flash-image")

# --- Service URLs ---
TTS_BASE_URL = os.environ.get("TTS_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
TTS_API_KEY = os.environ.get("TTS_API_KEY", os.environ.get("GEMINI_API_KEY", ""))

# --- Timeouts (seconds) ---
LLM_TIMEOUT = float(os.environ.get("LLM_TIMEOUT", "300"))
TTS_TIMEOUT = float(os.environ.get("TTS_TIMEOUT", "300"))
LLM_MAX_RETRIES = int(os.environ.get("LLM_MAX_RETRIES", "3"))

# --- Pipeline Limits ---
SOURCE_EXCERPT_CHARS = 8000
TOPIC_CONTEXT_CHARS = 5000
REPAIR_INPUT_CHARS = 10000
SPEAK_TEXT_MAX_CHARS = 4000
TTS_SAMPLE_RATE = 24000


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment handed to the pipeline and the clients."""
    llm_base_url: str = LLM_BASE_URL
    llm_api_key: str = LLM_API_KEY
    fast_model: str = FAST_MODEL
    creative_model: str = CREATIVE_MODEL
    tts_model: str = TTS_MODEL
    image_model: str = IMAGE_MODEL
    tts_base_url: str = TTS_BASE_URL
    tts_api_key: str = TTS_API_KEY
    llm_timeout: float = LLM_TIMEOUT
    tts_timeout: float = TTS_TIMEOUT
    llm_max_retries: int = LLM_MAX_RETRIES

    @classmethod
    def from_env(cls) -> "Settings":
        """Re-read the environment (module constants are frozen at import)."""
        gemini_key = os.environ.get("GEMINI_API_KEY", "")
        return cls(
            llm_base_url=os.environ.get("LLM_BASE_URL", cls.llm_base_url),
            llm_api_key=os.environ.get("LLM_API_KEY", gemini_key),
            fast_model=os.environ.get("FAST_MODEL_NAME", cls.fast_model),
            creative_model=os.environ.get("CREATIVE_MODEL_NAME", cls.creative_model),
            tts_model=os.environ.get("TTS_MODEL_NAME", cls.tts_model),
            image_model=os.environ.get("IMAGE_MODEL_NAME", cls.image_model),
            tts_base_url=os.environ.get("TTS_BASE_URL", cls.tts_base_url),
            tts_api_key=os.environ.get("TTS_API_KEY", gemini_key),
            llm_timeout=float(os.environ.get("LLM_TIMEOUT", cls.llm_timeout)),
            tts_timeout=float(os.environ.get("TTS_TIMEOUT", cls.tts_timeout)),
            llm_max_retries=int(os.environ.get("LLM_MAX_RETRIES", cls.llm_max_retries)),
        )
