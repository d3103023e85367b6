from typing import Optional
from urllib.parse import unquote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.database import get_db
from app.models.user_choice import UserChoiceRepository
from app.schemas.user_choice import ChoiceRequest, GeoLocation, UserChoice

router = APIRouter(prefix="/api/choices", tags=["choices"])


def get_choice_repository(db=Depends(get_db)) -> UserChoiceRepository:
    return UserChoiceRepository(db)


def geo_from_request(request: Request) -> GeoLocation:
    """프록시/CDN 헤더에서 접속 IP와 국가·도시를 추출 (없으면 None)."""
    headers = request.headers
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else None

    country = headers.get("x-vercel-ip-country") or headers.get("cf-ipcountry")
    city = headers.get("x-vercel-ip-city")
    return GeoLocation(
        ip=ip or None,
        country=country or None,
        city=unquote(city) if city else None,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def record_choice(
    choice: ChoiceRequest,
    request: Request,
    repo: UserChoiceRepository = Depends(get_choice_repository),
):
    geo = geo_from_request(request)
    payload = choice.model_dump(exclude_none=True)
    payload.update(ip_address=geo.ip, country=geo.country, city=geo.city)

    result = await repo.record(payload)
    if not result.ok:
        raise HTTPException(status_code=422, detail=[v.model_dump() for v in result.violations])
    return {"status": "ok", "id": result.inserted_id}


@router.get("/session/{session_id}", response_model=list[UserChoice])
async def list_session_choices(
    session_id: str,
    game_id: Optional[str] = Query(None, description="특정 덱으로 한정"),
    repo: UserChoiceRepository = Depends(get_choice_repository),
):
    return await repo.list_for_session(session_id, game_id)


@router.get("/{game_id}", response_model=list[UserChoice])
async def list_recent_choices(
    game_id: str,
    limit: int = Query(50, ge=1, le=500),
    repo: UserChoiceRepository = Depends(get_choice_repository),
):
    """최근 선택 이벤트 (최신순)."""
    return await repo.list_recent(game_id, limit)
