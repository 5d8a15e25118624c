"""
취소 토큰

모든 스토어 호출에 명시적으로 전달되는 취소 플래그 + 데드라인.
호출 전에 check() 로 확인하고, 남은 시간은 요청 타임아웃으로 넘긴다.
"""
import threading
import time
from typing import Optional

from core.errors import OperationCancelledError


class CancellationToken:
    """취소 플래그와 선택적 데드라인

    Example:
        >>> ctx = CancellationToken.with_timeout(30)
        >>> driver.provision_server(meta, userdata, ctx)
    """

    def __init__(self, deadline: Optional[float] = None):
        # deadline 은 time.monotonic() 기준
        self._deadline = deadline
        self._event = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def background(cls) -> "CancellationToken":
        """취소되지 않는 기본 토큰"""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """데드라인까지 남은 초 (데드라인 없으면 None)"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """취소되었으면 OperationCancelledError"""
        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise OperationCancelledError("deadline exceeded")

    def request_timeout(self, default: Optional[float] = None) -> Optional[float]:
        """kubernetes 클라이언트 _request_timeout 값"""
        remaining = self.remaining()
        if remaining is None:
            return default
        if default is None:
            return remaining
        return min(remaining, default)


__all__ = ["CancellationToken"]
