"""
Template 컨트롤러

워크로드(Machine) 이름으로 Tinkerbell Template 을 조회 후 없으면 생성.
기존 Template 은 절대 덮어쓰지 않는다 (파라미터가 달라도 경고만 남김).
"""
import logging
from typing import Any, Dict

import yaml

from core.errors import ConflictError, NotFoundError
from services.tinkerbell.store import ResourceStore
from utils.cancellation import CancellationToken
from utils.config import (
    TEMPLATE_KIND, ANNOTATION_OS_IMAGE_URL, ANNOTATION_METADATA_URL,
    LABEL_MANAGED_BY, MANAGED_BY, WORKFLOW_DEVICE_KEY,
)

logger = logging.getLogger(__name__)

ACTION_IMAGES = {
    "disk-wipe": "quay.io/tinkerbell-actions/disk-wipe:v1.0.0",
    "image2disk": "quay.io/tinkerbell-actions/image2disk:v1.0.0",
    "writefile": "quay.io/tinkerbell-actions/writefile:v1.0.0",
    "kexec": "quay.io/tinkerbell-actions/kexec:v1.0.0",
}

# tink 서버가 워크플로우 생성 시 Hardware 정보로 치환하는 표현식
DEST_DISK = "{{ index .Hardware.Disks 0 }}"
ROOT_PARTITION = "{{ formatPartition ( index .Hardware.Disks 0 ) 1 }}"


def _cloud_init_config(metadata_url: str) -> str:
    """Hegel 을 EC2 호환 데이터소스로 사용하는 cloud-init 설정"""
    return yaml.safe_dump({
        "datasource": {
            "Ec2": {
                "metadata_urls": [metadata_url],
                "strict_id": False,
            }
        },
        "manage_etc_hosts": "localhost",
        "warnings": {"dsid_missing_source": "off"},
    }, sort_keys=False)


def render_template(name: str, os_image_url: str, metadata_url: str) -> str:
    """Tinkerbell Template 문서 렌더링

    1. 디스크 초기화
    2. OS 이미지 스트리밍
    3. cloud-init 데이터소스(Hegel) 설정 기록
    4. kexec 로 설치된 OS 부팅
    """
    write_file_env = {
        "DEST_DISK": ROOT_PARTITION,
        "FS_TYPE": "ext4",
        "UID": "0",
        "GID": "0",
        "MODE": "0600",
        "DIRMODE": "0700",
    }
    document = {
        "version": "0.1",
        "name": name,
        "global_timeout": 1800,
        "tasks": [
            {
                "name": "os-installation",
                "worker": "{{.%s}}" % WORKFLOW_DEVICE_KEY,
                "volumes": [
                    "/dev:/dev",
                    "/dev/console:/dev/console",
                    "/lib/firmware:/lib/firmware:ro",
                ],
                "actions": [
                    {
                        "name": "disk-wipe",
                        "image": ACTION_IMAGES["disk-wipe"],
                        "timeout": 90,
                        "environment": {"DEST_DISK": DEST_DISK},
                    },
                    {
                        "name": "stream-image",
                        "image": ACTION_IMAGES["image2disk"],
                        "timeout": 900,
                        "environment": {
                            "DEST_DISK": DEST_DISK,
                            "IMG_URL": os_image_url,
                            "COMPRESSED": "true",
                        },
                    },
                    {
                        "name": "add-cloud-init-config",
                        "image": ACTION_IMAGES["writefile"],
                        "timeout": 90,
                        "environment": {
                            **write_file_env,
                            "DEST_PATH": "/etc/cloud/cloud.cfg.d/10_tinkerbell.cfg",
                            "CONTENTS": _cloud_init_config(metadata_url),
                        },
                    },
                    {
                        "name": "add-cloud-init-ds-identify",
                        "image": ACTION_IMAGES["writefile"],
                        "timeout": 90,
                        "environment": {
                            **write_file_env,
                            "DEST_PATH": "/etc/cloud/ds-identify.cfg",
                            "CONTENTS": "datasource: Ec2\n",
                        },
                    },
                    {
                        "name": "kexec-image",
                        "image": ACTION_IMAGES["kexec"],
                        "timeout": 90,
                        "pid": "host",
                        "environment": {
                            "BLOCK_DEVICE": ROOT_PARTITION,
                            "FS_TYPE": "ext4",
                        },
                    },
                ],
            }
        ],
    }
    return yaml.safe_dump(document, sort_keys=False)


class TemplateController:
    """Template 조회/생성/삭제"""

    def __init__(self, store: ResourceStore):
        self.store = store

    def get_or_create_template(self, name: str, namespace: str, os_image_url: str,
                               metadata_url: str, ctx: CancellationToken) -> Dict[str, Any]:
        """Template 조회, 없으면 생성

        이미 있으면 그대로 반환한다. 생성 당시 파라미터와 다르면 경고만 남긴다.
        """
        try:
            existing = self.store.get(ctx, TEMPLATE_KIND, namespace, name)
        except NotFoundError:
            existing = None

        if existing is not None:
            self._warn_on_mismatch(existing, os_image_url, metadata_url)
            return existing

        body = {
            "metadata": {
                "name": name,
                "namespace": namespace,
                "labels": {LABEL_MANAGED_BY: MANAGED_BY},
                "annotations": {
                    ANNOTATION_OS_IMAGE_URL: os_image_url,
                    ANNOTATION_METADATA_URL: metadata_url,
                },
            },
            "spec": {
                "data": render_template(name, os_image_url, metadata_url),
            },
        }
        try:
            created = self.store.create(ctx, TEMPLATE_KIND, namespace, body)
        except ConflictError:
            # 조회와 생성 사이에 다른 호출이 먼저 만든 경우
            logger.info(f"Template {namespace}/{name} created concurrently, reusing it")
            return self.store.get(ctx, TEMPLATE_KIND, namespace, name)

        logger.info(f"Template {namespace}/{name} created (image={os_image_url})")
        return created

    def delete_template(self, name: str, namespace: str, ctx: CancellationToken) -> None:
        """Template 삭제 (없으면 성공)"""
        try:
            self.store.delete(ctx, TEMPLATE_KIND, namespace, name)
        except NotFoundError:
            logger.warning(f"Template {namespace}/{name} already absent")
            return
        logger.info(f"Template {namespace}/{name} deleted")

    @staticmethod
    def _warn_on_mismatch(existing: Dict[str, Any], os_image_url: str, metadata_url: str) -> None:
        metadata = existing.get("metadata", {})
        annotations = metadata.get("annotations") or {}
        recorded = {
            "os image url": (annotations.get(ANNOTATION_OS_IMAGE_URL), os_image_url),
            "metadata url": (annotations.get(ANNOTATION_METADATA_URL), metadata_url),
        }
        for field, (have, want) in recorded.items():
            if have is not None and have != want:
                logger.warning(
                    f"Template {metadata.get('namespace')}/{metadata.get('name')} "
                    f"keeps {field} {have!r}, requested {want!r}; existing template is not modified"
                )
