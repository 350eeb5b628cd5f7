from typing import Literal, Optional

from pydantic import BaseModel

from verisight.schemas.analysis import VoteTally

VoteDirection = Literal["up", "down"]
VoteAction = Literal["added", "removed", "changed"]


class VoteRequest(BaseModel):
    vote: VoteDirection


class VoteOut(BaseModel):
    analysis_id: str
    action: VoteAction
    user_vote: Optional[VoteDirection] = None
    votes: VoteTally


class UserVoteOut(BaseModel):
    analysis_id: str
    vote: Optional[VoteDirection] = None


class UserVotesOut(BaseModel):
    votes: dict[str, VoteDirection]
