"""
Tinkerbell 프로비저닝 드라이버

Machine 하나의 라이프사이클을 순서대로 실행:
    미점유 → 점유 → Template 준비 → Workflow 생성(프로비저닝) → 미점유

- get_server: Machine UID 로 점유된 Hardware 조회
- provision_server: 점유 → userdata → Tinkerbell 반영 → Template → Workflow
- validate: 부수효과 없이 driverSpec 사전 검증
- deprovision_server: Workflow 삭제 → 점유 해제 → Hardware 삭제 → Template 삭제

재시도/롤백은 하지 않는다. 단계가 실패하면 StepFailedError 로 즉시 반환하고,
호출 측(리컨실러)이 멱등한 연산을 다시 호출한다.
"""
import logging
from typing import Any, Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from core.config import settings
from core.errors import (
    ConfigurationError,
    DriverError,
    HardwareNotFoundError,
    InvalidKubeconfigEncodingError,
    OperationCancelledError,
    StepFailedError,
    ValidationError,
)
from core.registry import ResourceRegistry, tinkerbell_registry
from models.baremetal import Hardware, MachineMeta, NamespacedName, TinkerbellConfig, TinkerbellPluginSpec
from services.tinkerbell.config import decode_embedded_kubeconfig
from services.tinkerbell.hardware import HardwareController
from services.tinkerbell.store import ResourceStore
from services.tinkerbell.template import TemplateController
from services.tinkerbell.workflow import WorkflowController, workflow_name_for
from utils.cancellation import CancellationToken
from utils.k8s_client import get_custom_objects_api, new_custom_objects_api

logger = logging.getLogger(__name__)

SpecValidator = Callable[[TinkerbellPluginSpec], None]


def require_hardware_ref(spec: TinkerbellPluginSpec) -> None:
    ref = spec.hardware_ref
    if not ref.name or not ref.namespace:
        raise ValidationError("hardwareRef.name and hardwareRef.namespace are required")


def require_encoded_kubeconfig(spec: TinkerbellPluginSpec) -> None:
    value = spec.auth.kubeconfig.value
    if not value:
        return
    try:
        decode_embedded_kubeconfig(value)
    except InvalidKubeconfigEncodingError as e:
        raise ValidationError(str(e)) from e


DEFAULT_VALIDATORS: List[SpecValidator] = [require_hardware_ref, require_encoded_kubeconfig]


class TinkerbellDriver:
    """Hardware / Template / Workflow 컨트롤러를 묶는 오케스트레이터"""

    def __init__(self, tink_config: TinkerbellConfig, hardware_ref: NamespacedName,
                 hardware: HardwareController, templates: TemplateController,
                 workflows: WorkflowController, template_namespace: Optional[str] = None,
                 validators: Optional[List[SpecValidator]] = None):
        self.config = tink_config
        self.hardware_ref = hardware_ref
        self.hardware = hardware
        self.templates = templates
        self.workflows = workflows
        self.template_namespace = template_namespace or settings.TEMPLATE_NAMESPACE
        self.validators = list(DEFAULT_VALIDATORS if validators is None else validators)

    def _step(self, step: str, ctx: CancellationToken, fn: Callable, *args) -> Any:
        """단계 실행. 취소는 그대로, 그 외 드라이버 에러는 단계 이름으로 감싼다"""
        ctx.check()
        try:
            return fn(*args)
        except OperationCancelledError:
            raise
        except DriverError as e:
            logger.warning(f"Step failed: {step}: {e}")
            raise StepFailedError(step, e) from e

    # ============================================
    # 라이프사이클
    # ============================================

    def get_server(self, meta: MachineMeta, ctx: Optional[CancellationToken] = None) -> Hardware:
        """Machine UID 로 점유된 Hardware 조회

        Raises:
            HardwareNotFoundError: 점유된 Hardware 없음
        """
        ctx = ctx or CancellationToken.background()
        return self.hardware.get_hardware_with_id(meta.uid, ctx)

    def provision_server(self, meta: MachineMeta, userdata: str,
                         ctx: Optional[CancellationToken] = None) -> Hardware:
        """Hardware 점유 후 Template/Workflow 생성

        Returns:
            Hardware: Tinkerbell 클러스터에 반영된 점유 Hardware
        """
        ctx = ctx or CancellationToken.background()
        _require_uid(meta)
        ref = self.hardware_ref

        hardware = self._step(f"get hardware {ref}", ctx, self.hardware.get_hardware, ref, ctx)
        self._step(f"claim hardware {ref}", ctx, self.hardware.set_hardware_id, hardware, meta.uid, ctx)
        self._step(f"set userdata on hardware {ref}", ctx,
                   self.hardware.set_hardware_user_data, hardware, userdata, ctx)
        server = self._step(f"create hardware {ref} on tinkerbell cluster", ctx,
                            self.hardware.create_hardware_on_tink_cluster, hardware, ctx)

        template = self._step(
            f"get or create template {self.template_namespace}/{meta.name}", ctx,
            self.templates.get_or_create_template,
            meta.name, self.template_namespace, self.config.os_image_url, self.config.hegel_url, ctx,
        )
        template_name = template.get("metadata", {}).get("name", meta.name)

        workflow_name = workflow_name_for(server.name)
        self._step(f"create workflow {server.namespace}/{workflow_name}", ctx,
                   self.workflows.create_workflow, workflow_name, template_name, server, ctx)

        logger.info(f"Machine {meta.name} ({meta.uid}) provisioned on hardware {server.namespace}/{server.name}")
        return server

    def validate(self, raw_spec: Optional[dict] = None) -> None:
        """부수효과 없는 driverSpec 사전 검증

        비어있으면 통과. 검증 규칙은 self.validators 에 추가한다.
        """
        if not raw_spec:
            return
        try:
            spec = TinkerbellPluginSpec.model_validate(raw_spec)
        except PydanticValidationError as e:
            raise ValidationError(f"invalid driver spec: {e}") from e

        for validator in self.validators:
            validator(spec)

    def deprovision_server(self, meta: MachineMeta, ctx: Optional[CancellationToken] = None) -> None:
        """Workflow/Hardware/Template 정리 및 점유 해제

        점유 해제는 Hardware 삭제 전에 풀 클러스터 원본에 기록한다.
        """
        ctx = ctx or CancellationToken.background()
        _require_uid(meta)

        hardware = self._step(f"find hardware claimed by {meta.uid}", ctx,
                              self._find_claimed_hardware, meta.uid, ctx)
        hardware_key = f"{hardware.namespace}/{hardware.name}"

        workflow_name = workflow_name_for(hardware.name)
        self._step(f"delete workflow {hardware.namespace}/{workflow_name}", ctx,
                   self.workflows.delete_workflow, workflow_name, hardware.namespace, ctx)
        self._step(f"reset hardware id for {hardware_key}", ctx,
                   self._release_hardware, hardware, meta.uid, ctx)
        self._step(f"delete hardware {hardware_key}", ctx,
                   self.hardware.delete_hardware, hardware, ctx)
        self._step(f"delete template {self.template_namespace}/{meta.name}", ctx,
                   self.templates.delete_template, meta.name, self.template_namespace, ctx)

        logger.info(f"Machine {meta.name} ({meta.uid}) deprovisioned from hardware {hardware_key}")

    def _find_claimed_hardware(self, uid: str, ctx: CancellationToken) -> Hardware:
        """Tinkerbell 클러스터에서 점유 Hardware 조회

        Provision 이 Tinkerbell 반영 전에 실패했으면 사본이 없으므로
        풀 클러스터 원본(hardwareRef)의 점유 ID 로 찾는다.
        """
        try:
            return self.hardware.get_hardware_with_id(uid, ctx)
        except HardwareNotFoundError:
            source = self.hardware.get_hardware(self.hardware_ref, ctx)
            if source.id != uid:
                raise
        logger.warning(f"Hardware {self.hardware_ref} claimed by {uid} is missing on tinkerbell cluster")
        return source

    def _release_hardware(self, hardware: Hardware, uid: str, ctx: CancellationToken) -> None:
        ref = NamespacedName(name=hardware.name, namespace=hardware.namespace)
        source = self.hardware.get_hardware(ref, ctx)
        self.hardware.release_hardware_id(source, uid, ctx)


def _require_uid(meta: MachineMeta) -> None:
    # 빈 uid 는 점유 ID 로 쓸 수 없다 (미점유와 구분 불가)
    if not meta.uid:
        raise ValidationError(f"machine {meta.name!r} has an empty uid")


def new_tinkerbell_driver(tink_config: TinkerbellConfig, driver_spec: TinkerbellPluginSpec,
                          pool_api=None, tink_api=None,
                          registry: Optional[ResourceRegistry] = None,
                          template_namespace: Optional[str] = None) -> TinkerbellDriver:
    """TinkerbellDriver 생성

    Args:
        tink_config: get_config() 결과
        driver_spec: hardwareRef 를 포함한 driverSpec
        pool_api: 하드웨어 풀 클러스터 CustomObjectsApi (없으면 환경 자동 감지)
        tink_api: Tinkerbell 클러스터 CustomObjectsApi (없으면 tink_config 로 생성)
    """
    registry = registry or tinkerbell_registry()

    if tink_api is None:
        if tink_config.client_configuration is None:
            raise ConfigurationError("failed to create tinkerbell client: client configuration is missing")
        tink_api = new_custom_objects_api(tink_config.client_configuration)

    if pool_api is None:
        try:
            pool_api = get_custom_objects_api()
        except RuntimeError as e:
            raise ConfigurationError(f"failed to get Kubernetes config: {e}") from e

    pool_store = ResourceStore(pool_api, registry)
    tink_store = ResourceStore(tink_api, registry)

    return TinkerbellDriver(
        tink_config=tink_config,
        hardware_ref=driver_spec.hardware_ref,
        hardware=HardwareController(pool_store, tink_store),
        templates=TemplateController(tink_store),
        workflows=WorkflowController(tink_store),
        template_namespace=template_namespace,
    )
