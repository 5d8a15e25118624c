"""
드라이버 에러 정의

Error Hierarchy:
- DriverError: 모든 드라이버 에러의 베이스 (status_code 포함)
  - ConfigurationError: kubeconfig / driverSpec 해석 실패
  - ConnectivityError: 스토어(API 서버) 연결 불가
  - NotFoundError: 대상 리소스 없음
  - ConflictError: 동시 수정 / 다른 워크로드가 점유 중
  - ValidationError: Provision 전에 걸러야 하는 잘못된 스펙
  - OperationCancelledError: 취소 또는 데드라인 초과
  - StepFailedError: Provision/Deprovision 단계 실패 (원인 에러를 감쌈)

Usage:
    from core.errors import HardwareNotFoundError, translate_api_exception

    try:
        custom.get_namespaced_custom_object(...)
    except ApiException as e:
        raise translate_api_exception(e, "get hardware default/hw-1") from e
"""
from typing import Optional

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError


class DriverError(Exception):
    """드라이버 에러 베이스"""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


# =============================================================================
# Configuration
# =============================================================================

class ConfigurationError(DriverError):
    """설정 해석 실패"""
    status_code = 500


class InvalidKubeconfigEncodingError(ConfigurationError):
    """driverSpec 에 직접 넣은 kubeconfig 가 base64 가 아님"""


class ConfigVarResolutionError(ConfigurationError):
    """환경변수 / Secret / ConfigMap 조회 실패"""


class ClientConfigurationError(ConfigurationError):
    """kubeconfig 로부터 클라이언트 설정을 만들 수 없음"""


# =============================================================================
# Store
# =============================================================================

class ConnectivityError(DriverError):
    """API 서버 연결 불가 (503)"""
    status_code = 503


class NotFoundError(DriverError):
    """리소스 없음 (404)"""
    status_code = 404


class HardwareNotFoundError(NotFoundError):
    """조건에 맞는 Hardware 없음"""


class ConflictError(DriverError):
    """리소스 충돌 (409)"""
    status_code = 409


class ValidationError(DriverError):
    """driverSpec 검증 실패 (400)"""
    status_code = 400


class OperationCancelledError(DriverError):
    """취소되었거나 데드라인 초과 (504)"""
    status_code = 504


class StepFailedError(DriverError):
    """
    라이프사이클 단계 실패.

    어떤 단계에서 실패했는지(step)와 원인(cause)을 함께 보관한다.
    HTTP 상태 코드는 원인 에러의 것을 따른다.
    """

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause

    @property
    def status_code(self) -> int:
        return getattr(self.cause, "status_code", 500)


def translate_api_exception(e: Exception, operation: str) -> DriverError:
    """kubernetes 클라이언트 예외를 드라이버 에러로 변환

    Args:
        e: ApiException 또는 urllib3 전송 에러
        operation: 실패한 작업 설명 (e.g., "get hardware default/hw-1")

    Returns:
        DriverError: 호출 측에서 raise ... from e 로 사용
    """
    if isinstance(e, TransportError):
        return ConnectivityError(f"failed to {operation}: {e}")

    if isinstance(e, ApiException):
        if e.status == 404:
            return NotFoundError(f"failed to {operation}: not found")
        if e.status == 409:
            return ConflictError(f"failed to {operation}: {e.reason}")
        if not e.status:
            return ConnectivityError(f"failed to {operation}: {e.reason}")
        return DriverError(f"failed to {operation}: {e.reason}", status_code=e.status)

    return DriverError(f"failed to {operation}: {e}")


__all__ = [
    'DriverError',
    'ConfigurationError',
    'InvalidKubeconfigEncodingError',
    'ConfigVarResolutionError',
    'ClientConfigurationError',
    'ConnectivityError',
    'NotFoundError',
    'HardwareNotFoundError',
    'ConflictError',
    'ValidationError',
    'OperationCancelledError',
    'StepFailedError',
    'translate_api_exception',
]
