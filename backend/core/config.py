import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def get_secret(secret_id: str, fallback_env: str | None = None) -> str | None:
    env_value = os.getenv(fallback_env or secret_id.upper().replace("-", "_"))
    if env_value:
        return env_value

    try:
        from google.cloud import secretmanager

        project_id = os.getenv("GOOGLE_CLOUD_PROJECT", "lickedin-interviews")
        client = secretmanager.SecretManagerServiceClient()
        name = f"projects/{project_id}/secrets/{secret_id}/versions/latest"
        response = client.access_secret_version(request={"name": name})
        return response.payload.data.decode("UTF-8")
    except Exception:
        return None


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@lru_cache
def layercode_api_key() -> str:
    value = get_secret("layercode-api-key", "LAYERCODE_API_KEY")
    if not value:
        raise ValueError("Missing required secret: LAYERCODE_API_KEY")
    return value


@lru_cache
def layercode_pipeline_id() -> str:
    value = get_secret("layercode-pipeline-id", "LAYERCODE_PIPELINE_ID")
    if not value:
        raise ValueError("Missing required secret: LAYERCODE_PIPELINE_ID")
    return value


@lru_cache
def layercode_webhook_secret() -> str | None:
    return get_secret("layercode-webhook-secret", "LAYERCODE_WEBHOOK_SECRET")


@lru_cache
def supabase_jwt_secret() -> str:
    value = get_secret("supabase-jwt-secret", "SUPABASE_JWT_SECRET")
    if not value:
        raise ValueError("Missing required secret: SUPABASE_JWT_SECRET")
    return value


@lru_cache
def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./lickedin.db")


@lru_cache
def service_database_url() -> str:
    return get_secret("service-database-url", "SERVICE_DATABASE_URL") or database_url()


MODEL_PROVIDER = os.getenv("MODEL_PROVIDER", "openai").lower()
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gpt-4o-mini")
INTERVIEWER_MODEL = os.getenv("INTERVIEWER_MODEL", "gpt-4o-mini")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
LAYERCODE_AUTHORIZE_URL = os.getenv(
    "LAYERCODE_AUTHORIZE_URL", "https://api.layercode.com/v1/pipelines/authorize_session"
)
VOICE_FALLBACK_RESOLUTION = _env_flag("VOICE_FALLBACK_RESOLUTION", True)
VOICE_SESSION_TTL_SECONDS = int(os.getenv("VOICE_SESSION_TTL_SECONDS", "3600"))
TRANSCRIPTION_STREAM_SECONDS = int(os.getenv("TRANSCRIPTION_STREAM_SECONDS", str(30 * 60)))
