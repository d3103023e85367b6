import logging
from typing import List, Optional

from pymongo import ASCENDING, DESCENDING, IndexModel

from app.schemas.user_choice import UserChoice, validate_user_choice
from app.schemas.validation import WriteResult, Written

logger = logging.getLogger(__name__)

# 모델명 "UserChoice" → 컬렉션명 "userchoices"
USER_CHOICE_COLLECTION = "userchoices"

USER_CHOICE_INDEXES = [
    IndexModel([("session_id", ASCENDING)]),
    IndexModel([("game_id", ASCENDING)]),
    IndexModel([("timestamp", ASCENDING)]),
    IndexModel([("session_id", ASCENDING), ("game_id", ASCENDING), ("scene_id", ASCENDING)]),
    IndexModel([("game_id", ASCENDING), ("timestamp", DESCENDING)]),
    IndexModel([("timestamp", DESCENDING)]),
]


class UserChoiceRepository:
    """유저 선택 이벤트 저장소. 추가만 가능 (수정 API 없음)."""

    def __init__(self, db):
        self.collection = db[USER_CHOICE_COLLECTION]

    async def record(self, payload) -> WriteResult:
        result = validate_user_choice(payload)
        if not result.ok:
            logger.debug("선택 기록 검증 실패: %s", result.violations)
            return result

        # 지역 정보가 없으면 필드 자체를 저장하지 않음
        doc = result.record.model_dump(exclude_none=True)
        inserted = await self.collection.insert_one(doc)
        return Written(inserted_id=str(inserted.inserted_id))

    async def list_for_session(self, session_id: str, game_id: Optional[str] = None) -> List[UserChoice]:
        query = {"session_id": session_id}
        if game_id is not None:
            query["game_id"] = game_id
        cursor = self.collection.find(query, sort=[("timestamp", ASCENDING)])
        return [UserChoice.model_validate(doc) async for doc in cursor]

    async def list_recent(self, game_id: str, limit: int = 50) -> List[UserChoice]:
        cursor = self.collection.find(
            {"game_id": game_id},
            sort=[("timestamp", DESCENDING)],
            limit=limit,
        )
        return [UserChoice.model_validate(doc) async for doc in cursor]
