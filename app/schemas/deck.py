from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field, StringConstraints

from app.schemas.validation import ValidationResult, validate_record

# 필수 문자열: 빈 문자열도 누락으로 취급
RequiredStr = Annotated[str, StringConstraints(min_length=1)]


class GameOption(BaseModel):
    label: RequiredStr
    ref_valor: RequiredStr


class GameScene(BaseModel):
    """장면 1개 = 선택지 정확히 2개 (A vs B)."""

    scene_id: RequiredStr
    image_url: RequiredStr
    title: RequiredStr
    comment: RequiredStr
    options: list[GameOption] = Field(..., min_length=2, max_length=2)


class GameDeck(BaseModel):
    """덱(Mazo): 버전이 있는 장면 묶음. game_id 는 전체 덱에서 유일."""

    game_id: RequiredStr
    version: RequiredStr
    title: RequiredStr
    description: RequiredStr
    scenes: list[GameScene] = Field(default_factory=list)
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeckSummary(BaseModel):
    """덱 목록 응답용 (장면 제외)."""

    game_id: str
    version: str
    title: str
    description: str
    scene_count: int


def validate_game_deck(payload) -> ValidationResult:
    return validate_record(GameDeck, payload)
