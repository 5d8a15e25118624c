"""
리소스 레지스트리

CRD 종류(kind)를 CustomObjectsApi 호출 좌표(group/version/plural)로 매핑.
전역 상태 없이 드라이버/컨트롤러 생성자에 명시적으로 전달한다.
"""
from dataclasses import dataclass
from typing import Dict

from utils.config import (
    TINKERBELL_GROUP, TINKERBELL_VERSION,
    HARDWARE_KIND, TEMPLATE_KIND, WORKFLOW_KIND,
)


@dataclass(frozen=True)
class ResourceKind:
    """CustomObjectsApi 호출에 필요한 좌표"""
    kind: str
    group: str
    version: str
    plural: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"


class ResourceRegistry:
    """kind → ResourceKind 매핑"""

    def __init__(self):
        self._kinds: Dict[str, ResourceKind] = {}

    def register(self, kind: str, group: str, version: str, plural: str) -> ResourceKind:
        resource = ResourceKind(kind=kind, group=group, version=version, plural=plural)
        self._kinds[kind] = resource
        return resource

    def get(self, kind: str) -> ResourceKind:
        try:
            return self._kinds[kind]
        except KeyError:
            raise KeyError(f"kind {kind!r} is not registered") from None

    def __contains__(self, kind: str) -> bool:
        return kind in self._kinds


def tinkerbell_registry() -> ResourceRegistry:
    """Tinkerbell v1alpha1 Hardware/Template/Workflow 가 등록된 새 레지스트리"""
    registry = ResourceRegistry()
    registry.register(HARDWARE_KIND, TINKERBELL_GROUP, TINKERBELL_VERSION, "hardware")
    registry.register(TEMPLATE_KIND, TINKERBELL_GROUP, TINKERBELL_VERSION, "templates")
    registry.register(WORKFLOW_KIND, TINKERBELL_GROUP, TINKERBELL_VERSION, "workflows")
    return registry
