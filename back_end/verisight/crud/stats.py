# 카운터 컬럼은 항상 SQL 증감식으로만 변경 (read-modify-write 금지)
from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from verisight.db.models.analysis_result import AnalysisResult
from verisight.db.models.user import User


def shifted(column, delta: int, floor: int | None = 0):
    expr = column + delta
    if floor is None or delta >= 0:
        return expr
    return case((expr < floor, floor), else_=expr)


def shift_user_counters(db: Session, user_id: str, floor: int | None = 0, **deltas: int) -> int:
    values = {name: shifted(getattr(User, name), d, floor) for name, d in deltas.items() if d}
    if not values:
        return 1
    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def shift_tally(db: Session, analysis_id: str, up: int = 0, down: int = 0) -> None:
    values = {}
    if up:
        values["votes_up"] = shifted(AnalysisResult.votes_up, up)
    if down:
        values["votes_down"] = shifted(AnalysisResult.votes_down, down)
    if not values:
        return
    db.execute(
        update(AnalysisResult)
        .where(AnalysisResult.id == analysis_id)
        .values(values)
        .execution_options(synchronize_session=False)
    )


def recompute_accuracy(db: Session, author_id: str) -> float:
    """
    accuracy = 작성자의 분석 중 투표가 있는 것들 가운데 up > down 인 비율(%)
    """
    voted = (AnalysisResult.votes_up + AnalysisResult.votes_down) > 0
    row = db.execute(
        select(
            func.sum(case((voted, 1), else_=0)),
            func.sum(case((voted & (AnalysisResult.votes_up > AnalysisResult.votes_down), 1), else_=0)),
        ).where(AnalysisResult.user_id == author_id)
    ).one()
    total, accurate = int(row[0] or 0), int(row[1] or 0)
    rate = round(100.0 * accurate / total, 1) if total else 0.0
    db.execute(
        update(User)
        .where(User.id == author_id)
        .values(accuracy_rate=rate)
        .execution_options(synchronize_session=False)
    )
    return rate
