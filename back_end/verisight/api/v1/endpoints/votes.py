from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from verisight.api.v1.deps import require_voter_id
from verisight.crud.votes import get_user_votes
from verisight.db.session import get_db
from verisight.schemas.vote import UserVotesOut

router = APIRouter()


# explore 화면에서 카드별 내 투표 상태를 한번에 조회
@router.get("/me", response_model=UserVotesOut)
def my_votes(
    analysis_ids: list[str] = Query(default=[]),
    user_id: str = Depends(require_voter_id),
    db: Session = Depends(get_db),
):
    return UserVotesOut(votes=get_user_votes(db, user_id, analysis_ids))
