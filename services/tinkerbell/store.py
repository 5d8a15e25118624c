"""
리소스 스토어 어댑터

CustomObjectsApi 위에서 kind 단위로 get/list/create/replace/delete 를 제공.
- 호출 전 취소 토큰 확인
- 남은 시간을 _request_timeout 으로 전달
- ApiException / 전송 에러를 core.errors 로 변환
"""
import logging
from typing import Any, Dict, List, Optional

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError

from core.config import settings
from core.errors import translate_api_exception
from core.registry import ResourceRegistry
from utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class ResourceStore:
    """단일 클러스터의 커스텀 리소스 접근자"""

    def __init__(self, api, registry: ResourceRegistry, timeout: Optional[float] = None):
        self.api = api
        self.registry = registry
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout

    def _call(self, ctx: CancellationToken, operation: str, method, **kwargs) -> Any:
        ctx.check()
        try:
            return method(_request_timeout=ctx.request_timeout(self.timeout), **kwargs)
        except (ApiException, TransportError) as e:
            raise translate_api_exception(e, operation) from e

    def get(self, ctx: CancellationToken, kind: str, namespace: str, name: str) -> Dict[str, Any]:
        resource = self.registry.get(kind)
        return self._call(
            ctx, f"get {kind.lower()} {namespace}/{name}",
            self.api.get_namespaced_custom_object,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            name=name,
        )

    def list_all(self, ctx: CancellationToken, kind: str) -> List[Dict[str, Any]]:
        """모든 네임스페이스의 오브젝트 목록"""
        resource = self.registry.get(kind)
        result = self._call(
            ctx, f"list {resource.plural}",
            self.api.list_cluster_custom_object,
            group=resource.group,
            version=resource.version,
            plural=resource.plural,
        )
        return result.get("items", [])

    def create(self, ctx: CancellationToken, kind: str, namespace: str, body: Dict[str, Any]) -> Dict[str, Any]:
        resource = self.registry.get(kind)
        body.setdefault("apiVersion", resource.api_version)
        body.setdefault("kind", resource.kind)
        name = body.get("metadata", {}).get("name", "")
        return self._call(
            ctx, f"create {kind.lower()} {namespace}/{name}",
            self.api.create_namespaced_custom_object,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            body=body,
        )

    def replace(self, ctx: CancellationToken, kind: str, namespace: str, name: str,
                body: Dict[str, Any]) -> Dict[str, Any]:
        """전체 교체. body 의 metadata.resourceVersion 이 다르면 409 (ConflictError)"""
        resource = self.registry.get(kind)
        return self._call(
            ctx, f"update {kind.lower()} {namespace}/{name}",
            self.api.replace_namespaced_custom_object,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            name=name,
            body=body,
        )

    def delete(self, ctx: CancellationToken, kind: str, namespace: str, name: str) -> None:
        resource = self.registry.get(kind)
        self._call(
            ctx, f"delete {kind.lower()} {namespace}/{name}",
            self.api.delete_namespaced_custom_object,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            name=name,
        )
