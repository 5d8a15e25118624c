"""
Workflow 컨트롤러

점유된 Hardware 와 Template 을 묶는 Tinkerbell Workflow 생성/삭제.
Workflow 이름은 항상 "<hardware 이름>-workflow".
"""
import logging
from typing import Any, Dict

from core.errors import ConflictError, NotFoundError
from models.baremetal import Hardware
from services.tinkerbell.store import ResourceStore
from utils.cancellation import CancellationToken
from utils.config import (
    WORKFLOW_KIND, WORKFLOW_NAME_SUFFIX, WORKFLOW_DEVICE_KEY,
    LABEL_MANAGED_BY, MANAGED_BY,
)

logger = logging.getLogger(__name__)


def workflow_name_for(hardware_name: str) -> str:
    return hardware_name + WORKFLOW_NAME_SUFFIX


class WorkflowController:
    """Workflow 생성/삭제"""

    def __init__(self, store: ResourceStore):
        self.store = store

    def create_workflow(self, name: str, template_name: str, hardware: Hardware,
                        ctx: CancellationToken) -> Dict[str, Any]:
        """Hardware 네임스페이스에 Workflow 생성

        같은 이름이 이미 있으면 그대로 반환 (Provision 전체 재시도 시).
        """
        body = {
            "metadata": {
                "name": name,
                "namespace": hardware.namespace,
                "labels": {LABEL_MANAGED_BY: MANAGED_BY},
            },
            "spec": {
                "templateRef": template_name,
                "hardwareRef": hardware.name,
                "hardwareMap": {WORKFLOW_DEVICE_KEY: hardware.mac_address},
            },
        }
        try:
            created = self.store.create(ctx, WORKFLOW_KIND, hardware.namespace, body)
        except ConflictError:
            logger.info(f"Workflow {hardware.namespace}/{name} already exists")
            return self.store.get(ctx, WORKFLOW_KIND, hardware.namespace, name)

        logger.info(
            f"Workflow {hardware.namespace}/{name} created "
            f"(template={template_name}, hardware={hardware.name})"
        )
        return created

    def delete_workflow(self, name: str, namespace: str, ctx: CancellationToken) -> None:
        """Workflow 삭제 (없으면 성공)"""
        try:
            self.store.delete(ctx, WORKFLOW_KIND, namespace, name)
        except NotFoundError:
            logger.warning(f"Workflow {namespace}/{name} already absent")
            return
        logger.info(f"Workflow {namespace}/{name} deleted")
