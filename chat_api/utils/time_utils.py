"""
시간 관련 유틸리티 함수
"""
from datetime import datetime, timedelta


def utc_now() -> datetime:
    """
    현재 UTC 시간 (naive)을 MongoDB 저장 정밀도(밀리초)로 잘라 반환합니다.

    저장 후 다시 읽은 값과 비교해도 동일하게 유지됩니다.
    """
    now = datetime.utcnow()
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def expires_in(days: int) -> datetime:
    """현재 시간으로부터 days일 뒤의 만료 시각"""
    return utc_now() + timedelta(days=days)
