"""ジオコーディング機能のEnum定義"""
from enum import Enum


class GeocodingStatus(str, Enum):
    """Google Geocoding APIのstatusフィールド"""

    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    OVER_DAILY_LIMIT = "OVER_DAILY_LIMIT"
    OVER_QUERY_LIMIT = "OVER_QUERY_LIMIT"
    REQUEST_DENIED = "REQUEST_DENIED"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

    @classmethod
    def from_value(cls, value: str) -> "GeocodingStatus":
        """未知のステータスはUNKNOWN_ERRORとして扱う"""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN_ERROR
