import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api import choices, decks
from app.database import MongoConnectionManager
from config import settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(manager: MongoConnectionManager | None = None, ensure_indexes: bool = True) -> FastAPI:
    """
    앱 생성. 연결 매니저는 앱이 소유하며 시작 시 인덱스를 선언하고 종료 시 연결을 닫는다.
    테스트에서는 가짜 클라이언트를 쓰는 매니저를 주입한다.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo = manager or MongoConnectionManager(db_name=settings.MONGODB_DB_NAME, tz_aware=True)
        app.state.mongo = mongo
        try:
            if ensure_indexes:
                await mongo.ensure_indexes()
            yield
        finally:
            await mongo.release_connection()

    app = FastAPI(title="visualdilemma-backend", lifespan=lifespan)
    app.include_router(decks.router)
    app.include_router(choices.router)

    @app.get("/health")
    async def health():
        """서버 상태 확인용 헬스체크 API"""
        return {
            "status": "ok",
            "service": "visualdilemma-backend",
            "mongo": app.state.mongo.is_connected,
        }

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
