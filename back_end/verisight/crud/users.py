import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from verisight.core.exceptions import ConflictError, InvalidStatField, NotFoundError
from verisight.crud.stats import shift_user_counters
from verisight.db.models.analysis_result import AnalysisResult
from verisight.db.models.user import User
from verisight.db.models.user_settings import UserSettings
from verisight.db.models.user_vote import UserVote
from verisight.schemas.user import SettingsUpdate, UserCreate, UserUpdate
from verisight.services.badges import refresh_badges

logger = logging.getLogger(__name__)

# accuracy_rate는 투표에서 파생되는 값이라 직접 증가 불가
INCREMENTABLE_STATS = ("karma", "total_analyses", "community_votes")


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def require_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def create_user(db: Session, payload: UserCreate) -> User:
    user = User(
        id=payload.id,
        email=payload.email,
        display_name=payload.display_name,
        photo_url=payload.photo_url,
        badges=[],
    )
    db.add(user)
    db.add(UserSettings(user_id=payload.id))
    try:
        db.flush()
        refresh_badges(user)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"User already exists: {payload.id}") from e
    db.refresh(user)
    logger.info("user created id=%s", user.id)
    return user


def update_user(db: Session, user_id: str, payload: UserUpdate) -> User:
    user = require_user(db, user_id)

    if payload.display_name is not None:
        user.display_name = payload.display_name
    if payload.email is not None:
        user.email = payload.email
    if payload.photo_url is not None:
        user.photo_url = payload.photo_url

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user


def increment_user_stats(db: Session, user_id: str, field: str, value: int = 1) -> User:
    if field not in INCREMENTABLE_STATS:
        raise InvalidStatField(field)

    # karma는 음수 허용, 나머지는 0 아래로 안 내려감
    floor = None if field == "karma" else 0
    if shift_user_counters(db, user_id, floor=floor, **{field: value}) == 0:
        db.rollback()
        raise NotFoundError("User", user_id)

    user = require_user(db, user_id)
    db.refresh(user)
    refresh_badges(user)
    db.commit()
    db.refresh(user)
    return user


def get_settings(db: Session, user_id: str) -> UserSettings:
    require_user(db, user_id)
    row = db.get(UserSettings, user_id)
    if row is None:
        # 예전에 만들어진 유저는 설정 row가 없을 수 있음
        row = UserSettings(user_id=user_id)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def update_settings(db: Session, user_id: str, payload: SettingsUpdate) -> UserSettings:
    row = get_settings(db, user_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(row, key, value)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    return row


def delete_user(db: Session, user_id: str) -> None:
    """
    계정 삭제: 이 유저가 남긴 표는 먼저 회수해서 다른 분석의 집계를 맞추고,
    유저의 분석/그 분석에 달린 표/설정/유저를 같은 트랜잭션에서 지움.
    """
    from verisight.crud.votes import withdraw_user_votes

    require_user(db, user_id)
    try:
        withdraw_user_votes(db, user_id)

        own_ids = select(AnalysisResult.id).where(AnalysisResult.user_id == user_id)
        # 내 분석에 투표했던 유저들의 community_votes도 같이 줄임
        voters = db.execute(
            select(UserVote.user_id).where(UserVote.analysis_id.in_(own_ids))
        ).scalars().all()
        for voter_id in voters:
            shift_user_counters(db, voter_id, community_votes=-1)

        db.execute(delete(UserVote).where(UserVote.analysis_id.in_(own_ids)).execution_options(synchronize_session=False))
        db.execute(delete(AnalysisResult).where(AnalysisResult.user_id == user_id).execution_options(synchronize_session=False))
        db.execute(delete(UserSettings).where(UserSettings.user_id == user_id).execution_options(synchronize_session=False))
        db.execute(delete(User).where(User.id == user_id).execution_options(synchronize_session=False))
        db.commit()
    except Exception:
        db.rollback()
        raise
    # identity map에 남은 삭제된 객체 정리
    db.expunge_all()
    logger.info("user deleted id=%s voters_adjusted=%d", user_id, len(voters))
