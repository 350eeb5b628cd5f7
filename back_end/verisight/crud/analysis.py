import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from verisight.core.exceptions import NotFoundError
from verisight.crud.stats import shift_user_counters
from verisight.db.models.analysis_result import AnalysisResult
from verisight.db.models.user import User
from verisight.schemas.detection import DetectionReport
from verisight.services.badges import refresh_badges

logger = logging.getLogger(__name__)


def create_analysis(
    db: Session,
    user_id: str,
    content_type: str,
    content: str,
    report: DetectionReport,
) -> AnalysisResult:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)

    row = AnalysisResult(
        user_id=user_id,
        type=content_type,
        content=content,
        verdict=report.verdict,
        credibility_score=report.confidence_score,
        summary=report.analysis_summary,
        sources=report.source_urls(),
        evidence=[e.model_dump() for e in report.evidence],
        credibility_proof=[p.model_dump() for p in report.credibility_proof],
        votes_up=0,
        votes_down=0,
    )
    db.add(row)
    try:
        db.flush()
        # 분석 저장과 total_analyses 증가는 같은 트랜잭션
        shift_user_counters(db, user_id, total_analyses=1)
        db.refresh(user)
        refresh_badges(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    logger.info("analysis saved id=%s user=%s type=%s verdict=%s", row.id, user_id, content_type, row.verdict)
    return row


def get_analysis(db: Session, analysis_id: str) -> AnalysisResult | None:
    return db.get(AnalysisResult, analysis_id)


def get_user_analyses(db: Session, user_id: str, limit: int = 10) -> list[AnalysisResult]:
    stmt = (
        select(AnalysisResult)
        .where(AnalysisResult.user_id == user_id)
        .order_by(AnalysisResult.created_at.desc(), AnalysisResult.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def get_recent_analyses(db: Session, limit: int = 20) -> list[tuple[AnalysisResult, Optional[User]]]:
    # 작성자 정보는 outer join 한 번으로 (N+1 방지), 작성자가 없으면 None
    stmt = (
        select(AnalysisResult, User)
        .outerjoin(User, User.id == AnalysisResult.user_id)
        .order_by(AnalysisResult.created_at.desc(), AnalysisResult.id)
        .limit(limit)
    )
    return [(a, u) for a, u in db.execute(stmt).all()]


def explore_analyses(
    db: Session,
    query: Optional[str] = None,
    content_type: Optional[str] = None,
    sort: str = "recent",
    limit: int = 50,
) -> list[tuple[AnalysisResult, Optional[User]]]:
    stmt = select(AnalysisResult, User).outerjoin(User, User.id == AnalysisResult.user_id)

    q = (query or "").strip().lower()
    if q:
        stmt = stmt.where(
            or_(
                func.lower(AnalysisResult.content).contains(q, autoescape=True),
                func.lower(AnalysisResult.summary).contains(q, autoescape=True),
            )
        )
    if content_type and content_type != "all":
        stmt = stmt.where(AnalysisResult.type == content_type)

    if sort == "votes":
        total_votes = AnalysisResult.votes_up + AnalysisResult.votes_down
        stmt = stmt.order_by(total_votes.desc(), AnalysisResult.created_at.desc())
    elif sort == "credibility":
        stmt = stmt.order_by(AnalysisResult.credibility_score.desc(), AnalysisResult.created_at.desc())
    else:
        stmt = stmt.order_by(AnalysisResult.created_at.desc())

    stmt = stmt.order_by(AnalysisResult.id).limit(limit)
    return [(a, u) for a, u in db.execute(stmt).all()]


def get_analyses_changed_since(
    db: Session,
    since: Optional[datetime],
    after_id: Optional[str] = None,
    limit: int = 100,
) -> list[AnalysisResult]:
    # 커서는 (updated_at, id): 같은 시각에 바뀐 row가 limit에 잘려도 다음 폴링에서 이어받음
    stmt = select(AnalysisResult)
    if since is not None:
        if after_id is None:
            stmt = stmt.where(AnalysisResult.updated_at > since)
        else:
            stmt = stmt.where(
                or_(
                    AnalysisResult.updated_at > since,
                    and_(AnalysisResult.updated_at == since, AnalysisResult.id > after_id),
                )
            )
    stmt = stmt.order_by(AnalysisResult.updated_at.asc(), AnalysisResult.id).limit(limit)
    return list(db.execute(stmt).scalars().all())
