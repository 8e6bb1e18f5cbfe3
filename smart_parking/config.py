import os


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    HOST: str = os.getenv("PARKING_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PARKING_PORT", "5002"))
    LOG_LEVEL: str = os.getenv("PARKING_LOG_LEVEL", "info")
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("PARKING_CORS_ORIGINS", "*").split(",") if o.strip()]
    RELOAD: bool = _env_bool("PARKING_RELOAD")
    SSE_KEEPALIVE: float = float(os.getenv("PARKING_SSE_KEEPALIVE", "15"))


settings = Settings()
