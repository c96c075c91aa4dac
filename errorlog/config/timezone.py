"""
Timezone utilities for presenting UTC timestamps in local time.
"""
from datetime import datetime, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo


class TimezoneConverter:
    """Handles timezone conversions for the application"""
    
    def __init__(self, timezone: Optional[str] = None):
        """
        Initialize timezone converter.
        
        Args:
            timezone: IANA timezone name (default: the system's local time)
        """
        self.timezone = timezone
        self.tz = ZoneInfo(timezone) if timezone else None
    
    def utc_to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC datetime to local timezone.
        
        Args:
            utc_dt: UTC datetime (naive or aware)
        
        Returns:
            Datetime in local timezone
        """
        if utc_dt.tzinfo is None:
            # Assume naive datetime is UTC
            utc_dt = utc_dt.replace(tzinfo=dt_timezone.utc)
        
        return utc_dt.astimezone(self.tz)
    
    def to_utc(self, dt: datetime) -> datetime:
        """
        Normalize a datetime to naive UTC for storage.
        
        Args:
            dt: Aware datetime, or naive datetime in local time
        
        Returns:
            Naive datetime in UTC
        """
        return dt.astimezone(dt_timezone.utc).replace(tzinfo=None)
