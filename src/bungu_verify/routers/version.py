from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from ..deps import get_version_repo
from ..infrastructure.repositories.version_repository import VersionCounterRepository
from ..logging_config import get_logger
from ..schemas.verification import VersionResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["version"])


def _require_id(id: Optional[str]) -> str:
    if not id:
        raise HTTPException(status_code=400, detail="Missing id parameter")
    return id


@router.get("/version", response_model=VersionResponse)
async def get_version(
    response: Response,
    id: Optional[str] = None,
    repo: VersionCounterRepository = Depends(get_version_repo),
):
    tournament_id = _require_id(id)
    # version checks are polled constantly; let the edge absorb most of them
    response.headers["Cache-Control"] = "public, s-maxage=1, stale-while-revalidate=5"
    return VersionResponse(v=await repo.get(tournament_id))


@router.post("/version", response_model=VersionResponse)
async def bump_version(
    id: Optional[str] = None,
    repo: VersionCounterRepository = Depends(get_version_repo),
):
    tournament_id = _require_id(id)
    new_version = await repo.increment(tournament_id)
    logger.info("tournament_version_incremented", tournament_id=tournament_id, version=new_version)
    return VersionResponse(v=new_version)
