import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv
load_dotenv(".venv/.env")

def require_env(var_name: str, default: Optional[str] = None) -> str:
    val = os.getenv(var_name)
    if not val:
        if default is None:
            raise ValueError(f"Missing required environment variable: {var_name}")
        val = default
    return val


def _float_env(var_name: str, default: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {var_name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    secrets_dir: str
    firebase_credentials: str
    collection_prefix: str
    tool_timeout_s: float
    context_timeout_s: float
    agent_model: str
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Read settings once per process. Tests that need different values
    call get_settings.cache_clear() after patching the environment.
    """
    secrets_dir = require_env("SECRETS_DIR", ".secrets")
    return Settings(
        secrets_dir=secrets_dir,
        firebase_credentials=require_env(
            "FIREBASE_CREDENTIALS", os.path.join(secrets_dir, "firebase.json")
        ),
        collection_prefix=os.getenv("FIRESTORE_COLLECTION_PREFIX", ""),
        tool_timeout_s=_float_env("AGENT_TOOL_TIMEOUT_S", 15.0),
        context_timeout_s=_float_env("AGENT_CONTEXT_TIMEOUT_S", 30.0),
        agent_model=require_env("AGENT_MODEL", "gpt-4.1-mini"),
        log_level=require_env("LOG_LEVEL", "INFO"),
    )
