from fastapi import APIRouter

from packages.config import CACHE_TTL_SECONDS, RUN_MODE
from ..schemas import HealthResponse


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health():
    return {"status": "ok", "run_mode": RUN_MODE, "cache_ttl_seconds": CACHE_TTL_SECONDS}
