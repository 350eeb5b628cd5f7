from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from verisight.schemas.detection import (
    ContentType, CredibilityProof, DetectionReport, Evidence, Verdict,
)

ANONYMOUS_NAME = "Anonymous User"
PREVIEW_LENGTH = 200

ExploreSort = Literal["recent", "votes", "credibility"]


def content_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    if len(content) > length:
        return content[:length] + "..."
    return content


class VoteTally(BaseModel):
    up: int = 0
    down: int = 0


class AnalysisOut(BaseModel):
    id: str
    user_id: str
    type: ContentType
    content: str
    verdict: Verdict
    credibility_score: float
    summary: str
    sources: list[str]
    evidence: list[Evidence]
    credibility_proof: list[CredibilityProof]
    community_votes: VoteTally
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "AnalysisOut":
        return cls(
            id=row.id,
            user_id=row.user_id,
            type=row.type,
            content=row.content,
            verdict=row.verdict,
            credibility_score=row.credibility_score,
            summary=row.summary,
            sources=row.sources or [],
            evidence=row.evidence or [],
            credibility_proof=row.credibility_proof or [],
            community_votes=VoteTally(up=row.votes_up, down=row.votes_down),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


# 커뮤니티(explore/recent) 화면용: 작성자 정보 포함
class AnalysisCard(AnalysisOut):
    user_display_name: str = ANONYMOUS_NAME
    user_photo_url: Optional[str] = None
    content_preview: str = ""

    @classmethod
    def from_row_with_author(cls, row, author) -> "AnalysisCard":
        base = AnalysisOut.from_row(row)
        return cls(
            **base.model_dump(),
            user_display_name=(author.display_name if author and author.display_name else ANONYMOUS_NAME),
            user_photo_url=(author.photo_url if author else None),
            content_preview=content_preview(row.content),
        )


class AnalyzeResponse(BaseModel):
    report: DetectionReport
    analysis: Optional[AnalysisOut] = None


class ChangesResponse(BaseModel):
    analyses: list[AnalysisOut]
    # 다음 폴링 때 since / after_id로 넘길 값
    cursor: Optional[datetime] = None
    cursor_id: Optional[str] = None

