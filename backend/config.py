import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    # Ranking oracle (remote REST backend)
    oracle_base_url: str = "http://localhost:3001/api"
    match_path: str = "/matching/matches"
    usage_path: str = "/access/usage/{feature}"
    preferences_path: str = "/user-preferences"
    ranking_feature_key: str = "matching-engine"
    request_timeout_s: float = 15.0

    # Engine behaviour
    preferences_debounce_ms: int = 600
    default_min_match_percentage: int = 50
    scoring_strategy: str = "check_ratio"  # "check_ratio" | "weighted"
    generate_rate_limit: str = "10/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
