from typing import Optional

from fastapi import Header, HTTPException

# 인증은 외부(Firebase 등)에서 처리, 여기선 uid만 헤더로 받음
USER_HEADER = "X-User-Id"


def get_optional_user_id(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> Optional[str]:
    if x_user_id is None:
        return None
    uid = x_user_id.strip()
    return uid or None


def require_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
) -> str:
    uid = get_optional_user_id(x_user_id)
    if uid is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return uid


def require_voter_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
) -> str:
    uid = get_optional_user_id(x_user_id)
    if uid is None:
        raise HTTPException(status_code=401, detail="Please sign in to vote on analyses")
    return uid


# 본인 계정만 수정/삭제 가능
def require_self(
    user_id: str,
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
) -> str:
    caller = require_user_id(x_user_id)
    if caller != user_id:
        raise HTTPException(status_code=403, detail="Not allowed to modify another user")
    return caller
