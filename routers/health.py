"""
Health check API

- /api/health: 프로세스 생존 확인
- /api/k8s/health: 하드웨어 풀 클러스터 연결 및 Hardware CRD 제공 여부
"""
import logging

from fastapi import APIRouter
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError

from core.registry import tinkerbell_registry
from utils.config import HARDWARE_KIND
from utils.k8s_client import get_core_v1_api, get_custom_objects_api, get_environment_info

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])

POOL_CLUSTER = "pool"


def _hardware_crd_served() -> bool:
    """풀 클러스터가 Tinkerbell Hardware 리소스를 제공하는지 확인"""
    hardware = tinkerbell_registry().get(HARDWARE_KIND)
    try:
        get_custom_objects_api().list_cluster_custom_object(
            group=hardware.group,
            version=hardware.version,
            plural=hardware.plural,
            limit=1,
        )
        return True
    except ApiException as e:
        if e.status == 404:
            logger.warning(f"{hardware.api_version} {hardware.kind} is not served by the pool cluster")
        else:
            logger.warning(f"Failed to list {hardware.plural} on pool cluster: {e.reason}")
        return False
    except TransportError as e:
        logger.warning(f"Failed to list {hardware.plural} on pool cluster: {e}")
        return False


@router.get("/api/health")
async def health_check():
    """API 헬스체크"""
    return {"status": "healthy", "service": "k3s-baremetal-driver"}


@router.get("/api/k8s/health")
def pool_cluster_health():
    """하드웨어 풀 클러스터 헬스체크

    API 서버 응답과 Hardware CRD 가 모두 확인되어야 프로비저닝이 가능하다.
    """
    try:
        get_core_v1_api().list_namespace(limit=1)
    except (ApiException, TransportError, RuntimeError) as e:
        return {"status": "disconnected", "cluster": POOL_CLUSTER, "error": str(e)}

    return {
        "status": "connected",
        "cluster": POOL_CLUSTER,
        "hardware_crd": _hardware_crd_served(),
        **get_environment_info(),
    }
