"""
Integration tests for health check API
"""
import pytest
from unittest.mock import MagicMock, patch

from kubernetes.client.rest import ApiException


class TestHealthAPI:
    """Tests for /api/health endpoints"""

    def test_health_check(self, client):
        """Test basic health check"""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "k3s-baremetal-driver"

    def test_k8s_health_connected(self, client, mock_core_v1, mock_pool_custom):
        """Test pool cluster health check when connected"""
        mock_core_v1.list_namespace.return_value = MagicMock()
        mock_pool_custom.list_cluster_custom_object.return_value = {"items": []}

        response = client.get("/api/k8s/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "connected"
        assert data["cluster"] == "pool"
        assert data["hardware_crd"] is True
        assert "environment" in data
        mock_core_v1.list_namespace.assert_called_once_with(limit=1)
        mock_pool_custom.list_cluster_custom_object.assert_called_once_with(
            group="tinkerbell.org", version="v1alpha1", plural="hardware", limit=1
        )

    def test_k8s_health_without_hardware_crd(self, client, mock_core_v1, mock_pool_custom):
        """Test pool cluster reachable but Hardware CRD not installed"""
        mock_pool_custom.list_cluster_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        response = client.get("/api/k8s/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "connected"
        assert data["hardware_crd"] is False

    def test_k8s_health_disconnected(self, client):
        """Test pool cluster health check when disconnected"""
        with patch("routers.health.get_core_v1_api") as mock:
            mock.side_effect = RuntimeError("Connection failed")

            response = client.get("/api/k8s/health")
            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "disconnected"
            assert data["cluster"] == "pool"
            assert "Connection failed" in data["error"]


@pytest.mark.asyncio
class TestHealthAPIAsync:
    """Async tests for health API"""

    async def test_health_check_async(self, async_client):
        """Test health check with async client"""
        response = await async_client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
