from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# 외부 판별 API 응답 스키마 (raw_response 파싱 후)

ContentType = Literal["text", "image", "video"]
Verdict = Literal["REAL", "FAKE"]

_FAKE_WORDS = {"FAKE", "FALSE", "MANIPULATED"}
_REAL_WORDS = {"REAL", "TRUE", "AUTHENTIC"}
_NEGATIONS = {"NOT", "NO", "NON"}


def normalize_verdict(value: str) -> str:
    # 단어 단위로만 매칭 ("UNTRUE"는 TRUE가 아님), 부정어나 애매한 라벨은 거절
    words = set(re.findall(r"[A-Z]+", (value or "").upper()))
    fake, real = words & _FAKE_WORDS, words & _REAL_WORDS
    if words & _NEGATIONS or bool(fake) == bool(real):
        raise ValueError(f"unexpected verdict: {value!r}")
    return "FAKE" if fake else "REAL"


class CredibilityProof(BaseModel):
    claim_verified: str = ""
    matched_fact: str = ""
    source_proof_url: str = ""


class Evidence(BaseModel):
    reputation_score: float = 0.0
    similarity_score: float = 0.0
    source_title: str = ""
    source_url: str = ""
    summary: str = ""


class DetectionReport(BaseModel):
    analysis_summary: str = ""
    confidence_score: float = Field(default=0.0)
    credibility_proof: list[CredibilityProof] = Field(default_factory=list)
    evidence: list[Evidence] = Field(default_factory=list)
    input_content: str = ""
    input_type: str = ""
    verdict: Verdict

    @field_validator("verdict", mode="before")
    @classmethod
    def _normalize_verdict(cls, v):
        return normalize_verdict(str(v))

    @field_validator("credibility_proof", "evidence", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    def source_urls(self) -> list[str]:
        urls: list[str] = []
        for item in self.evidence:
            if item.source_url and item.source_url not in urls:
                urls.append(item.source_url)
        for proof in self.credibility_proof:
            if proof.source_proof_url and proof.source_proof_url not in urls:
                urls.append(proof.source_proof_url)
        return urls
