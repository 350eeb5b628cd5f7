from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from verisight.schemas.detection import ContentType

class UserCreate(BaseModel):
    id: str = Field(min_length=1, max_length=128)
    email: Optional[str] = Field(default=None, max_length=255)
    display_name: str = Field(min_length=1, max_length=100)
    photo_url: Optional[str] = Field(default=None, max_length=1024)

class UserUpdate(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    photo_url: Optional[str] = Field(default=None, max_length=1024)

class UserOut(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: str
    photo_url: Optional[str] = None
    created_at: datetime
    karma: int
    total_analyses: int
    accuracy_rate: float
    community_votes: int
    badges: list[str]

    class Config:
        from_attributes = True

class SettingsOut(BaseModel):
    email_notifications: bool
    community_notifications: bool
    security_alerts: bool
    default_analysis_mode: ContentType
    auto_save: bool
    dark_mode: bool

    class Config:
        from_attributes = True

class SettingsUpdate(BaseModel):
    email_notifications: Optional[bool] = None
    community_notifications: Optional[bool] = None
    security_alerts: Optional[bool] = None
    default_analysis_mode: Optional[ContentType] = None
    auto_save: Optional[bool] = None
    dark_mode: Optional[bool] = None
