from fastapi import APIRouter, Depends, HTTPException, status

from app.database import get_db
from app.models.deck import DeckRepository
from app.schemas.deck import DeckSummary, GameDeck

router = APIRouter(prefix="/api/decks", tags=["decks"])


def get_deck_repository(db=Depends(get_db)) -> DeckRepository:
    return DeckRepository(db)


@router.get("", response_model=list[DeckSummary])
async def list_decks(repo: DeckRepository = Depends(get_deck_repository)):
    """활성화된 덱 목록 (제목순)."""
    decks = await repo.list_active()
    return [
        DeckSummary(
            game_id=deck.game_id,
            version=deck.version,
            title=deck.title,
            description=deck.description,
            scene_count=len(deck.scenes),
        )
        for deck in decks
    ]


@router.get("/{game_id}", response_model=GameDeck)
async def get_deck(game_id: str, repo: DeckRepository = Depends(get_deck_repository)):
    deck = await repo.get(game_id)
    if deck is None:
        raise HTTPException(status_code=404, detail="존재하지 않거나 비활성화된 덱입니다.")
    return deck


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_deck(payload: dict, repo: DeckRepository = Depends(get_deck_repository)):
    # 검증은 저장소에서 수행 (위반 목록을 그대로 응답)
    result = await repo.create(payload)
    if not result.ok:
        detail = [v.model_dump() for v in result.violations]
        if result.has_violation("game_id", "unique"):
            raise HTTPException(status_code=409, detail=detail)
        raise HTTPException(status_code=422, detail=detail)
    return {"status": "ok", "id": result.inserted_id, "game_id": payload["game_id"]}


@router.post("/{game_id}/deactivate")
async def deactivate_deck(game_id: str, repo: DeckRepository = Depends(get_deck_repository)):
    if not await repo.deactivate(game_id):
        raise HTTPException(status_code=404, detail="존재하지 않는 덱입니다.")
    return {"status": "ok", "game_id": game_id, "active": False}
