from datetime import datetime, timezone
from typing import Optional, Union
import pytz
from dateutil import parser as date_parser


class DateUtils:
    """
    Timezone-aware datetime helpers

    Everything stored or compared is UTC. Naive values coming back from
    the database are assumed to be UTC.
    """

    UTC = timezone.utc

    @classmethod
    def now_utc(cls) -> datetime:
        """Get current UTC datetime - always use this for database storage"""
        return datetime.now(cls.UTC)

    @classmethod
    def to_utc(cls, dt: datetime, source_timezone: Optional[str] = None) -> datetime:
        """
        Convert datetime to UTC

        Args:
            dt: datetime to convert
            source_timezone: source timezone (if dt is naive)
        """
        if dt.tzinfo is None:
            if source_timezone:
                tz = pytz.timezone(source_timezone)
                dt = tz.localize(dt)
            else:
                dt = dt.replace(tzinfo=cls.UTC)

        return dt.astimezone(cls.UTC)

    @classmethod
    def parse_datetime(cls, value: Union[str, datetime, None]) -> Optional[datetime]:
        """
        Parse a stored timestamp into an aware UTC datetime

        SQLite hands timestamps back as strings (2026-01-03 10:30:00.000000),
        PostgreSQL as datetime objects; both end up here.
        """
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return cls.to_utc(value)
        try:
            parsed_dt = date_parser.isoparse(value)
        except ValueError:
            parsed_dt = date_parser.parse(value)
        return cls.to_utc(parsed_dt)

    @classmethod
    def is_expired(cls, expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
        """True when expires_at is set and not in the future"""
        if expires_at is None:
            return False
        now = cls.to_utc(now) if now else cls.now_utc()
        return cls.to_utc(expires_at) <= now
