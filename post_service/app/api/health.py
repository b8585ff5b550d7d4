from __future__ import annotations

from fastapi import APIRouter


router = APIRouter()


@router.get("/health", summary="헬스 체크")
def health() -> dict[str, str]:
    # DB 에 의존하지 않는 liveness 체크
    return {"status": "ok", "service": "post-service"}
