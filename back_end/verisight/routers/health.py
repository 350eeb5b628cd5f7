# verisight/routers/health.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

from verisight.db.session import get_db

router = APIRouter(prefix="/health", tags=["health"])

# 연결 체크
@router.get("")
def health():
    return {"ok": True}

@router.get("/db")
def health_db(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database unavailable: {type(e).__name__}")
    return {"result": "database connected"}
