from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.deck import RequiredStr
from app.schemas.validation import ValidationResult, validate_record


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserChoice(BaseModel):
    """유저 선택 이벤트. 한 번 저장되면 수정하지 않음 (append-only)."""

    session_id: RequiredStr
    game_id: RequiredStr
    scene_id: RequiredStr
    chosen_option: RequiredStr
    timestamp: datetime = Field(default_factory=utcnow)
    ip_address: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None


class ChoiceRequest(BaseModel):
    """선택 기록 요청. ip/지역 정보는 서버가 요청에서 채운다."""

    session_id: Optional[str] = None
    game_id: Optional[str] = None
    scene_id: Optional[str] = None
    chosen_option: Optional[str] = None


class GeoLocation(BaseModel):
    country: Optional[str] = None
    city: Optional[str] = None
    ip: Optional[str] = None


def validate_user_choice(payload) -> ValidationResult:
    return validate_record(UserChoice, payload)
