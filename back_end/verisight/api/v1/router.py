from fastapi import APIRouter
from verisight.api.v1.endpoints import analyses, analyze, users, votes

# main에서 /api/v1 prefix 부여
router = APIRouter()

router.include_router(analyze.router, prefix="/analyze", tags=["analyze"])
router.include_router(analyses.router, prefix="/analyses", tags=["analyses"])
router.include_router(votes.router, prefix="/votes", tags=["votes"])
router.include_router(users.router, prefix="/users", tags=["users"])
