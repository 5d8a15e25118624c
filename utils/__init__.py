# Utility functions
from .cancellation import CancellationToken

# 환경 자동 감지 K8s 클라이언트 (로컬 개발 지원)
from .k8s_client import (
    get_core_v1_api,
    get_custom_objects_api,
    new_custom_objects_api,
    is_running_in_cluster,
    get_environment_info,
)

__all__ = [
    'CancellationToken',
    # 환경 자동 감지 유틸리티
    'get_core_v1_api', 'get_custom_objects_api', 'new_custom_objects_api',
    'is_running_in_cluster', 'get_environment_info',
]
