import logging
from typing import List, Optional

from pymongo import ASCENDING, IndexModel
from pymongo.collation import Collation
from pymongo.errors import DuplicateKeyError

from app.schemas.deck import GameDeck, validate_game_deck
from app.schemas.user_choice import utcnow
from app.schemas.validation import Invalid, Violation, WriteResult, Written

logger = logging.getLogger(__name__)

# 모델명 "Mazo" → 컬렉션명 "mazos"
DECK_COLLECTION = "mazos"
# 스페인어 로케일, 대소문자 무시 비교 (game_id 유일성/정렬)
DECK_COLLATION = Collation(locale="es", strength=2)

DECK_INDEXES = [
    IndexModel([("game_id", ASCENDING)], name="game_id_1", unique=True, collation=DECK_COLLATION),
    IndexModel([("active", ASCENDING)], name="active_1"),
]


class DeckRepository:
    """덱(Mazo) 저장소. 삭제 대신 active=False 로 비활성화."""

    def __init__(self, db):
        self.collection = db[DECK_COLLECTION]

    async def create(self, payload) -> WriteResult:
        result = validate_game_deck(payload)
        if not result.ok:
            return result

        now = utcnow()
        doc = result.record.model_dump()
        doc["created_at"] = now
        doc["updated_at"] = now
        try:
            inserted = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.info("중복 game_id: %s", doc["game_id"])
            return Invalid(violations=[
                Violation(
                    field="game_id",
                    constraint="unique",
                    message=f"game_id '{doc['game_id']}' already exists",
                )
            ])
        return Written(inserted_id=str(inserted.inserted_id))

    async def get(self, game_id: str, active_only: bool = True) -> Optional[GameDeck]:
        query = {"game_id": game_id}
        if active_only:
            query["active"] = True
        doc = await self.collection.find_one(query, collation=DECK_COLLATION)
        return GameDeck.model_validate(doc) if doc else None

    async def list_active(self) -> List[GameDeck]:
        cursor = self.collection.find(
            {"active": True},
            sort=[("title", ASCENDING)],
            collation=DECK_COLLATION,
        )
        return [GameDeck.model_validate(doc) async for doc in cursor]

    async def deactivate(self, game_id: str) -> bool:
        """비활성화 대상이 없으면 False."""
        result = await self.collection.update_one(
            {"game_id": game_id},
            {"$set": {"active": False, "updated_at": utcnow()}},
            collation=DECK_COLLATION,
        )
        return result.matched_count > 0
