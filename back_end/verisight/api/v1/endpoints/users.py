from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from verisight.api.v1.deps import require_self
from verisight.core.config import settings
from verisight.crud import users as users_crud
from verisight.crud.analysis import get_user_analyses
from verisight.db.session import get_db
from verisight.schemas.analysis import AnalysisOut
from verisight.schemas.user import SettingsOut, SettingsUpdate, UserCreate, UserOut, UserUpdate

router = APIRouter()


class StatIncrement(BaseModel):
    field: str
    value: int = 1


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return users_crud.create_user(db, payload)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = users_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=UserOut, dependencies=[Depends(require_self)])
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    return users_crud.update_user(db, user_id, payload)


@router.delete("/{user_id}", status_code=204, dependencies=[Depends(require_self)])
def delete_user(user_id: str, db: Session = Depends(get_db)):
    users_crud.delete_user(db, user_id)
    return Response(status_code=204)


@router.post("/{user_id}/stats", response_model=UserOut, dependencies=[Depends(require_self)])
def increment_stats(user_id: str, payload: StatIncrement, db: Session = Depends(get_db)):
    return users_crud.increment_user_stats(db, user_id, payload.field, payload.value)


@router.get("/{user_id}/analyses", response_model=list[AnalysisOut])
def user_analyses(
    user_id: str,
    limit: int = Query(settings.USER_ANALYSES_LIMIT, ge=1, le=200),
    db: Session = Depends(get_db),
):
    users_crud.require_user(db, user_id)
    return [AnalysisOut.from_row(r) for r in get_user_analyses(db, user_id, limit=limit)]


@router.get("/{user_id}/settings", response_model=SettingsOut, dependencies=[Depends(require_self)])
def get_settings(user_id: str, db: Session = Depends(get_db)):
    return users_crud.get_settings(db, user_id)


@router.put("/{user_id}/settings", response_model=SettingsOut, dependencies=[Depends(require_self)])
def update_settings(user_id: str, payload: SettingsUpdate, db: Session = Depends(get_db)):
    return users_crud.update_settings(db, user_id, payload)
