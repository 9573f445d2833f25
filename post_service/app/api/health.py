from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from common.mongo import client as mongo_client


router = APIRouter()


@router.get("/health", summary="헬스 체크")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready", summary="MongoDB 연결 확인")
def ready() -> JSONResponse:
    if not mongo_client.ping():
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(content={"status": "ok"})
