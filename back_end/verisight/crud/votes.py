import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from verisight.core.config import settings
from verisight.core.exceptions import NotFoundError, VoteConflictError
from verisight.crud.stats import recompute_accuracy, shift_tally, shift_user_counters
from verisight.db.models.analysis_result import AnalysisResult
from verisight.db.models.user import User
from verisight.db.models.user_vote import UserVote
from verisight.services.badges import refresh_badges

logger = logging.getLogger(__name__)

UP = "up"
DOWN = "down"


@dataclass
class VoteOutcome:
    analysis_id: str
    action: str  # "added" | "removed" | "changed"
    user_vote: Optional[str]
    up: int
    down: int


def _direction_delta(direction: str, sign: int) -> tuple[int, int]:
    return (sign, 0) if direction == UP else (0, sign)


def _lock_analysis(db: Session, analysis_id: str) -> AnalysisResult:
    # 트랜잭션 첫 문장을 no-op UPDATE로 해서 쓰기 락부터 잡음
    # postgres는 row lock, sqlite는 DB write lock (sqlite는 FOR UPDATE를 무시하고
    # SELECT만으로는 트랜잭션이 시작되지 않아서 기존 표를 락 없이 읽게 됨)
    locked = db.execute(
        update(AnalysisResult)
        .where(AnalysisResult.id == analysis_id)
        .values(votes_up=AnalysisResult.votes_up, updated_at=AnalysisResult.updated_at)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not locked:
        raise NotFoundError("Analysis", analysis_id)
    return db.execute(
        select(AnalysisResult)
        .where(AnalysisResult.id == analysis_id)
        .execution_options(populate_existing=True)
    ).scalar_one()


def _read_tally(db: Session, analysis_id: str) -> tuple[int, int]:
    row = db.execute(
        select(AnalysisResult.votes_up, AnalysisResult.votes_down).where(AnalysisResult.id == analysis_id)
    ).one()
    return int(row[0]), int(row[1])


def _refresh_user_badges(db: Session, *user_ids: str) -> None:
    for uid in dict.fromkeys(user_ids):
        user = db.get(User, uid)
        if user is None:
            continue
        db.refresh(user)
        refresh_badges(user)


def _apply_vote(db: Session, user_id: str, analysis_id: str, direction: str) -> VoteOutcome:
    analysis = _lock_analysis(db, analysis_id)
    if db.get(User, user_id) is None:
        raise NotFoundError("User", user_id)

    existing = db.execute(
        select(UserVote).where(UserVote.user_id == user_id, UserVote.analysis_id == analysis_id)
    ).scalar_one_or_none()

    if existing is None:
        db.add(UserVote(user_id=user_id, analysis_id=analysis_id, direction=direction))
        # 동시에 같은 표가 들어왔으면 여기서 IntegrityError
        db.flush()
        action, new_vote = "added", direction
        up, down = _direction_delta(direction, +1)
        cast_delta = 1
    elif existing.direction == direction:
        # 같은 버튼 다시 누르면 투표 취소
        db.delete(existing)
        db.flush()
        action, new_vote = "removed", None
        up, down = _direction_delta(direction, -1)
        cast_delta = -1
    else:
        old = existing.direction
        existing.direction = direction
        db.flush()
        action, new_vote = "changed", direction
        old_up, old_down = _direction_delta(old, -1)
        new_up, new_down = _direction_delta(direction, +1)
        up, down = old_up + new_up, old_down + new_down
        cast_delta = 0

    shift_tally(db, analysis_id, up=up, down=down)
    shift_user_counters(db, user_id, community_votes=cast_delta)

    author_id = analysis.user_id
    if author_id != user_id:
        shift_user_counters(db, author_id, floor=None, karma=up - down)
    recompute_accuracy(db, author_id)
    _refresh_user_badges(db, user_id, author_id)

    tally_up, tally_down = _read_tally(db, analysis_id)
    return VoteOutcome(analysis_id=analysis_id, action=action, user_vote=new_vote, up=tally_up, down=tally_down)


def cast_vote(db: Session, user_id: str, analysis_id: str, direction: str) -> VoteOutcome:
    """
    투표 추가/변경/취소(토글)를 한 트랜잭션으로 처리.

    - 처음 투표: 해당 방향 +1
    - 같은 방향 다시: 투표 삭제, 해당 방향 -1
    - 반대 방향: 기존 방향 -1, 새 방향 +1

    votes 테이블의 (user_id, analysis_id) unique 제약에 걸리면
    (다른 요청이 먼저 같은 표를 넣은 경우) 롤백 후 다시 읽어서 재시도.
    """
    if direction not in (UP, DOWN):
        raise ValueError(f"invalid vote direction: {direction!r}")

    attempts = max(1, settings.VOTE_MAX_RETRIES)
    for attempt in range(1, attempts + 1):
        try:
            outcome = _apply_vote(db, user_id, analysis_id, direction)
            db.commit()
        except (IntegrityError, StaleDataError):
            db.rollback()
            logger.warning(
                "vote conflict user=%s analysis=%s attempt=%d/%d",
                user_id, analysis_id, attempt, attempts,
            )
            continue
        except Exception:
            db.rollback()
            raise

        logger.info(
            "vote %s user=%s analysis=%s up=%d down=%d",
            outcome.action, user_id, analysis_id, outcome.up, outcome.down,
        )
        return outcome

    raise VoteConflictError(f"Could not record vote on {analysis_id} after {attempts} attempts")


def get_user_vote(db: Session, user_id: str, analysis_id: str) -> Optional[str]:
    return db.execute(
        select(UserVote.direction).where(UserVote.user_id == user_id, UserVote.analysis_id == analysis_id)
    ).scalar_one_or_none()


def get_user_votes(db: Session, user_id: str, analysis_ids: Iterable[str]) -> dict[str, str]:
    ids = [a for a in analysis_ids if a]
    if not ids:
        return {}
    rows = db.execute(
        select(UserVote.analysis_id, UserVote.direction)
        .where(UserVote.user_id == user_id, UserVote.analysis_id.in_(ids))
    ).all()
    return {analysis_id: direction for analysis_id, direction in rows}


def recount_votes(db: Session, analysis_id: str) -> tuple[int, int]:
    """votes 테이블 기준으로 집계를 다시 계산 (예전 데이터의 카운터 drift 복구용)"""
    analysis = _lock_analysis(db, analysis_id)
    before = (analysis.votes_up, analysis.votes_down)
    author_id = analysis.user_id
    try:
        counts = dict(
            db.execute(
                select(UserVote.direction, func.count())
                .where(UserVote.analysis_id == analysis_id)
                .group_by(UserVote.direction)
            ).all()
        )
        up, down = int(counts.get(UP, 0)), int(counts.get(DOWN, 0))
        db.execute(
            update(AnalysisResult)
            .where(AnalysisResult.id == analysis_id)
            .values(votes_up=up, votes_down=down)
            .execution_options(synchronize_session=False)
        )
        recompute_accuracy(db, author_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    if (up, down) != before:
        logger.warning(
            "tally drift fixed analysis=%s was=%d/%d now=%d/%d",
            analysis_id, before[0], before[1], up, down,
        )
    return up, down


def withdraw_user_votes(db: Session, user_id: str) -> int:
    """
    유저가 남긴 모든 표를 회수 (commit은 호출한 쪽에서).
    """
    votes = db.execute(select(UserVote).where(UserVote.user_id == user_id)).scalars().all()
    authors: set[str] = set()
    for vote in votes:
        analysis = _lock_analysis(db, vote.analysis_id)
        up, down = _direction_delta(vote.direction, -1)
        shift_tally(db, vote.analysis_id, up=up, down=down)
        if analysis.user_id != user_id:
            shift_user_counters(db, analysis.user_id, floor=None, karma=up - down)
            authors.add(analysis.user_id)
        db.delete(vote)
    db.flush()
    shift_user_counters(db, user_id, community_votes=-len(votes))
    for author_id in authors:
        recompute_accuracy(db, author_id)
    return len(votes)
