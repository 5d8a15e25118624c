"""
Hardware 컨트롤러

하드웨어 점유(claim)/해제와 userdata 첨부.
- 풀 클러스터: 정적으로 참조되는 Hardware 원본, 점유 ID 기록
- Tinkerbell 클러스터: 점유된 Hardware 사본 (워크플로우가 참조)
"""
import logging
from typing import Optional

from core.errors import ConflictError, HardwareNotFoundError, NotFoundError, ValidationError
from models.baremetal import Hardware, NamespacedName
from services.tinkerbell.store import ResourceStore
from utils.cancellation import CancellationToken
from utils.config import HARDWARE_KIND

logger = logging.getLogger(__name__)

# 다른 클러스터에 그대로 옮기면 안 되는 서버 관리 필드
_SERVER_MANAGED_FIELDS = (
    "resourceVersion", "uid", "creationTimestamp", "generation",
    "managedFields", "selfLink",
)


class HardwareController:
    """Hardware 점유/해제 및 Tinkerbell 클러스터 반영"""

    def __init__(self, pool_store: ResourceStore, tink_store: ResourceStore):
        self.pool_store = pool_store
        self.tink_store = tink_store

    def get_hardware(self, ref: NamespacedName, ctx: CancellationToken) -> Hardware:
        """정적 참조(hardwareRef)로 풀 클러스터에서 Hardware 조회"""
        try:
            obj = self.pool_store.get(ctx, HARDWARE_KIND, ref.namespace, ref.name)
        except NotFoundError as e:
            raise HardwareNotFoundError(f"hardware {ref} not found") from e
        return Hardware.from_object(obj)

    def get_hardware_with_id(self, uid: str, ctx: CancellationToken) -> Hardware:
        """점유 ID 가 uid 인 Hardware 를 Tinkerbell 클러스터에서 조회"""
        for item in self.tink_store.list_all(ctx, HARDWARE_KIND):
            hardware = Hardware.from_object(item)
            if uid and hardware.id == uid:
                return hardware
        raise HardwareNotFoundError(f"no hardware claimed by {uid!r}")

    def set_hardware_id(self, hardware: Hardware, uid: str, ctx: CancellationToken) -> None:
        """풀 클러스터의 Hardware 에 점유 ID 기록

        resourceVersion 조건부 갱신이라 동시에 점유하면 한쪽은 ConflictError.
        이미 다른 워크로드가 점유 중이면 덮어쓰지 않는다.
        점유 해제는 release_hardware_id 로만 한다.
        """
        key = f"{hardware.namespace}/{hardware.name}"
        if not uid:
            raise ValidationError(f"cannot claim hardware {key} with an empty id")

        current = hardware.id
        if current and current != uid:
            raise ConflictError(f"hardware {key} is already claimed by {current!r}")

        self._write_id(hardware, uid, ctx)
        logger.info(f"Hardware {key} claimed by {uid}")

    def release_hardware_id(self, hardware: Hardware, uid: str, ctx: CancellationToken) -> bool:
        """uid 가 점유한 Hardware 의 점유 ID 를 비운다

        Returns:
            bool: 실제로 해제했으면 True. 미점유이거나 다른 워크로드의 점유면 False
        """
        key = f"{hardware.namespace}/{hardware.name}"
        if not uid:
            raise ValidationError(f"cannot release hardware {key} without an owner id")

        current = hardware.id
        if not current:
            return False
        if current != uid:
            logger.warning(f"Hardware {key} is claimed by {current}, not {uid}; leaving claim in place")
            return False

        self._write_id(hardware, "", ctx)
        logger.info(f"Hardware {key} released by {uid}")
        return True

    def _write_id(self, hardware: Hardware, uid: str, ctx: CancellationToken) -> None:
        hardware.set_id(uid)
        updated = self.pool_store.replace(
            ctx, HARDWARE_KIND, hardware.namespace, hardware.name, hardware.to_object()
        )
        hardware.raw = updated

    def set_hardware_user_data(self, hardware: Hardware, user_data: str, ctx: CancellationToken) -> None:
        """userdata 첨부 (다음 단계에서 Tinkerbell 클러스터로 반영)"""
        ctx.check()
        hardware.set_user_data(user_data)

    def create_hardware_on_tink_cluster(self, hardware: Hardware, ctx: CancellationToken) -> Hardware:
        """Tinkerbell 클러스터에 Hardware 생성, 이미 있으면 갱신"""
        body = hardware.to_object()
        metadata = body.setdefault("metadata", {})
        for field in _SERVER_MANAGED_FIELDS:
            metadata.pop(field, None)

        existing = self._get_tink_hardware(hardware, ctx)
        if existing is None:
            created = self.tink_store.create(ctx, HARDWARE_KIND, hardware.namespace, body)
            logger.info(f"Hardware {hardware.namespace}/{hardware.name} created on tinkerbell cluster")
            return Hardware.from_object(created)

        metadata["resourceVersion"] = existing.get("metadata", {}).get("resourceVersion", "")
        updated = self.tink_store.replace(ctx, HARDWARE_KIND, hardware.namespace, hardware.name, body)
        logger.info(f"Hardware {hardware.namespace}/{hardware.name} updated on tinkerbell cluster")
        return Hardware.from_object(updated)

    def delete_hardware(self, hardware: Hardware, ctx: CancellationToken) -> None:
        """Tinkerbell 클러스터에서 Hardware 삭제 (없으면 성공)"""
        try:
            self.tink_store.delete(ctx, HARDWARE_KIND, hardware.namespace, hardware.name)
        except NotFoundError:
            logger.warning(f"Hardware {hardware.namespace}/{hardware.name} already absent on tinkerbell cluster")
            return
        logger.info(f"Hardware {hardware.namespace}/{hardware.name} deleted from tinkerbell cluster")

    def _get_tink_hardware(self, hardware: Hardware, ctx: CancellationToken) -> Optional[dict]:
        try:
            return self.tink_store.get(ctx, HARDWARE_KIND, hardware.namespace, hardware.name)
        except NotFoundError:
            return None
