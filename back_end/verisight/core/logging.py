import logging

from verisight.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
    # SQL 로그는 SQL_ECHO로만 켠다
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # 요청마다 찍히는 httpx 로그는 너무 많음
    logging.getLogger("httpx").setLevel(logging.WARNING)
