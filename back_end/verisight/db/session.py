# db 연결
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm import Session

from verisight.core.config import settings


def make_engine(url: str, echo: bool = False):
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI threadpool에서 같은 커넥션을 쓸 수 있게
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        echo=echo,   # SQL 로그 출력
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# DB 세션 Dependency
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
