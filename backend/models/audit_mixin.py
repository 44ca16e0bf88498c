from sqlalchemy import Column, DateTime
from utils import local_now


class TimestampMixin:
    """Mixin that provides created/updated timestamps.

    Timestamps are timezone-aware and generated in the application timezone
    (APP_TIMEZONE, Asia/Seoul by default).
    """
    created_at = Column(DateTime(timezone=True), default=local_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=local_now, onupdate=local_now)
