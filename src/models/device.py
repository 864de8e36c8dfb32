from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base
from src.models.base import TimestampMixin


class Device(Base, TimestampMixin):
    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(primary_key=True)
    device_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    fcm_token: Mapped[Optional[str]] = mapped_column(String(4096))

    def __repr__(self) -> str:
        return f"<Device {self.device_id}>"
