from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from verisight.db.base import Base

class UserSettings(Base):
    __tablename__ = "user_settings"

    user_id: Mapped[str] = mapped_column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    community_notifications: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    security_alerts: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # "text" | "image" | "video"
    default_analysis_mode: Mapped[str] = mapped_column(String(10), default="text", nullable=False)
    auto_save: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    dark_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
