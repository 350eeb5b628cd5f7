from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from verisight.api.v1.deps import require_voter_id
from verisight.core.config import settings
from verisight.crud import analysis as analysis_crud
from verisight.crud import votes as votes_crud
from verisight.db.session import get_db
from verisight.schemas.analysis import (
    AnalysisCard, AnalysisOut, ChangesResponse, ExploreSort, VoteTally,
)
from verisight.schemas.detection import ContentType
from verisight.schemas.vote import UserVoteOut, VoteOut, VoteRequest

router = APIRouter()


@router.get("/recent", response_model=list[AnalysisCard])
def recent_analyses(
    limit: int = Query(settings.RECENT_ANALYSES_LIMIT, ge=1, le=200),
    db: Session = Depends(get_db),
):
    rows = analysis_crud.get_recent_analyses(db, limit=limit)
    return [AnalysisCard.from_row_with_author(a, u) for a, u in rows]


@router.get("/explore", response_model=list[AnalysisCard])
def explore(
    q: Optional[str] = Query(None, max_length=200),
    type: Optional[ContentType] = None,
    sort: ExploreSort = "recent",
    limit: int = Query(settings.EXPLORE_ANALYSES_LIMIT, ge=1, le=200),
    db: Session = Depends(get_db),
):
    rows = analysis_crud.explore_analyses(db, query=q, content_type=type, sort=sort, limit=limit)
    return [AnalysisCard.from_row_with_author(a, u) for a, u in rows]


# 실시간 리스너 대신 폴링: 마지막 cursor 이후 바뀐 분석들
@router.get("/changes", response_model=ChangesResponse)
def changes(
    since: Optional[datetime] = None,
    after_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows = analysis_crud.get_analyses_changed_since(db, since, after_id=after_id, limit=limit)
    if rows:
        cursor, cursor_id = rows[-1].updated_at, rows[-1].id
    else:
        cursor, cursor_id = since, after_id
    return ChangesResponse(
        analyses=[AnalysisOut.from_row(r) for r in rows], cursor=cursor, cursor_id=cursor_id,
    )


@router.get("/{analysis_id}", response_model=AnalysisOut)
def get_analysis(analysis_id: str, db: Session = Depends(get_db)):
    row = analysis_crud.get_analysis(db, analysis_id)
    if not row:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return AnalysisOut.from_row(row)


@router.post("/{analysis_id}/votes", response_model=VoteOut)
def vote(
    analysis_id: str,
    payload: VoteRequest,
    user_id: str = Depends(require_voter_id),
    db: Session = Depends(get_db),
):
    outcome = votes_crud.cast_vote(db, user_id, analysis_id, payload.vote)
    return VoteOut(
        analysis_id=outcome.analysis_id,
        action=outcome.action,
        user_vote=outcome.user_vote,
        votes=VoteTally(up=outcome.up, down=outcome.down),
    )


@router.get("/{analysis_id}/votes/me", response_model=UserVoteOut)
def my_vote(
    analysis_id: str,
    user_id: str = Depends(require_voter_id),
    db: Session = Depends(get_db),
):
    return UserVoteOut(analysis_id=analysis_id, vote=votes_crud.get_user_vote(db, user_id, analysis_id))


@router.post("/{analysis_id}/votes/recount", response_model=VoteTally)
def recount(analysis_id: str, db: Session = Depends(get_db)):
    up, down = votes_crud.recount_votes(db, analysis_id)
    return VoteTally(up=up, down=down)
