"""Durable storage of accepted full readings."""

from pyhealthmon.persistence.daily_log import BackgroundLogWriter, DailyLogWriter, LogWriter

__all__ = ["BackgroundLogWriter", "DailyLogWriter", "LogWriter"]
