import os
from pathlib import Path

from dotenv import load_dotenv


def load_env_files(base_dir=None):
    """
    .env.local → .env 순서로 로드. 먼저 읽은 값이 우선이므로
    실제 환경 변수 > .env.local > .env 순서가 된다.
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    load_dotenv(base / ".env.local")
    load_dotenv(base / ".env")


load_env_files()

DEFAULT_MONGODB_URI = "mongodb://localhost:27017/visualdilemma"
DEFAULT_DB_NAME = "visualdilemma"

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(value, default=False):
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUTHY


class Settings:
    # MONGODB_URI / APP_ENV / ALLOW_LOCAL_MONGODB 는 app.database.resolve_mongodb_uri 에서 읽음
    MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME")  # 없으면 URI의 기본 DB 사용
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = int(os.getenv("PORT", 8000))

settings = Settings()
