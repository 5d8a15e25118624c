"""
Pytest configuration and fixtures
"""
import copy
import os
import sys
import pytest
from typing import Generator, AsyncGenerator
from unittest.mock import MagicMock, patch

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from kubernetes.client.rest import ApiException

from models.baremetal import MachineMeta, NamespacedName, TinkerbellConfig, TinkerbellPluginSpec


# ============================================
# Fake Kubernetes store
# ============================================

class FakeCustomObjectsApi:
    """CustomObjectsApi 의 namespaced 호출만 흉내내는 인메모리 스토어

    - replace 는 metadata.resourceVersion 이 일치해야 성공 (아니면 409)
    - calls 에 (verb, plural, namespace, name) 기록
    """

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_on = {}
        self._version = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _record(self, verb, plural, namespace=None, name=None):
        self.calls.append((verb, plural, namespace, name))
        error = self.fail_on.get((verb, plural))
        if error is not None:
            raise error

    def put(self, plural: str, obj: dict) -> dict:
        """테스트 데이터 직접 저장"""
        stored = copy.deepcopy(obj)
        metadata = stored.setdefault("metadata", {})
        metadata["resourceVersion"] = self._next_version()
        self.objects[(plural, metadata["namespace"], metadata["name"])] = stored
        return copy.deepcopy(stored)

    def stored(self, plural: str, namespace: str, name: str):
        obj = self.objects.get((plural, namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    def verbs(self, plural: str = None):
        return [c[0] for c in self.calls if plural is None or c[1] == plural]

    def get_namespaced_custom_object(self, group, version, namespace, plural, name, **kwargs):
        self._record("get", plural, namespace, name)
        key = (plural, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        return copy.deepcopy(self.objects[key])

    def list_cluster_custom_object(self, group, version, plural, **kwargs):
        self._record("list", plural)
        items = [copy.deepcopy(obj) for key, obj in sorted(self.objects.items()) if key[0] == plural]
        return {"items": items}

    def create_namespaced_custom_object(self, group, version, namespace, plural, body, **kwargs):
        name = body["metadata"]["name"]
        self._record("create", plural, namespace, name)
        key = (plural, namespace, name)
        if key in self.objects:
            raise ApiException(status=409, reason="AlreadyExists")
        obj = copy.deepcopy(body)
        obj["metadata"]["namespace"] = namespace
        obj["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = obj
        return copy.deepcopy(obj)

    def replace_namespaced_custom_object(self, group, version, namespace, plural, name, body, **kwargs):
        self._record("replace", plural, namespace, name)
        key = (plural, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        current = self.objects[key]["metadata"]["resourceVersion"]
        if body.get("metadata", {}).get("resourceVersion") != current:
            raise ApiException(status=409, reason="Conflict")
        obj = copy.deepcopy(body)
        obj["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = obj
        return copy.deepcopy(obj)

    def delete_namespaced_custom_object(self, group, version, namespace, plural, name, **kwargs):
        self._record("delete", plural, namespace, name)
        key = (plural, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        del self.objects[key]
        return {"status": "Success"}


# ============================================
# Store Fixtures
# ============================================

@pytest.fixture
def pool_api():
    """하드웨어 풀 클러스터"""
    return FakeCustomObjectsApi()


@pytest.fixture
def tink_api():
    """Tinkerbell 클러스터"""
    return FakeCustomObjectsApi()


@pytest.fixture
def registry():
    from core.registry import tinkerbell_registry
    return tinkerbell_registry()


@pytest.fixture
def pool_store(pool_api, registry):
    from services.tinkerbell.store import ResourceStore
    return ResourceStore(pool_api, registry)


@pytest.fixture
def tink_store(tink_api, registry):
    from services.tinkerbell.store import ResourceStore
    return ResourceStore(tink_api, registry)


# ============================================
# Data Fixtures
# ============================================

@pytest.fixture
def sample_hardware():
    """풀에 등록된 미점유 Tinkerbell Hardware"""
    return {
        "apiVersion": "tinkerbell.org/v1alpha1",
        "kind": "Hardware",
        "metadata": {
            "name": "hardware-1",
            "namespace": "default",
            "uid": "0b5c6d0e-pool",
            "labels": {"gpu": "a100"},
        },
        "spec": {
            "disks": [{"device": "/dev/nvme0n1"}],
            "interfaces": [
                {
                    "netboot": {"allowPXE": True, "allowWorkflow": True},
                    "dhcp": {
                        "mac": "00:1A:2B:3C:4D:01",
                        "ip": {"address": "10.0.0.101", "gateway": "10.0.0.1"},
                        "hostname": "hardware-1",
                    },
                }
            ],
            "metadata": {"state": "available", "instance": {}},
        },
    }


@pytest.fixture
def seeded_pool(pool_api, sample_hardware):
    pool_api.put("hardware", sample_hardware)
    return pool_api


@pytest.fixture
def machine():
    return MachineMeta(name="worker-0", namespace="kube-system", uid="3f1e9a52-uid")


@pytest.fixture
def driver_spec():
    return TinkerbellPluginSpec.model_validate({
        "clusterName": "edge-1",
        "osImageUrl": "http://10.0.0.1:8080/images/ubuntu-22.04.raw.gz",
        "hegelUrl": "http://10.0.0.1:50061",
        "hardwareRef": {"name": "hardware-1", "namespace": "default"},
    })


@pytest.fixture
def tink_config():
    return TinkerbellConfig(
        kubeconfig="",
        cluster_name="edge-1",
        os_image_url="http://10.0.0.1:8080/images/ubuntu-22.04.raw.gz",
        hegel_url="http://10.0.0.1:50061",
    )


@pytest.fixture
def driver(tink_config, driver_spec, seeded_pool, tink_api):
    from services.tinkerbell.driver import new_tinkerbell_driver
    return new_tinkerbell_driver(tink_config, driver_spec, pool_api=seeded_pool, tink_api=tink_api)


@pytest.fixture
def hardware_ref():
    return NamespacedName(name="hardware-1", namespace="default")


# ============================================
# App Fixtures
# ============================================

@pytest.fixture(scope="session")
def app():
    """Create FastAPI app for testing"""
    from main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def client(app) -> Generator:
    """Synchronous test client"""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def driver_client(app, driver) -> Generator:
    """설정된 드라이버를 주입한 test client"""
    from routers.baremetal.tinkerbell import get_driver

    app.dependency_overrides[get_driver] = lambda: driver
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_driver, None)


@pytest.fixture
async def async_client(app) -> AsyncGenerator:
    """Asynchronous test client"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================
# Mock Fixtures
# ============================================

@pytest.fixture
def mock_core_v1():
    """Mock CoreV1Api used by the health router"""
    with patch("routers.health.get_core_v1_api") as mock:
        core_v1 = MagicMock()
        mock.return_value = core_v1
        yield core_v1


@pytest.fixture
def mock_pool_custom():
    """Mock pool cluster CustomObjectsApi used by the health router"""
    with patch("routers.health.get_custom_objects_api") as mock:
        custom = MagicMock()
        mock.return_value = custom
        yield custom
