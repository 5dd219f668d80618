from __future__ import annotations

from fastapi import APIRouter

from space_index.score.versions import SCI_CALC_VERSION

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok", "calc_version": SCI_CALC_VERSION}
