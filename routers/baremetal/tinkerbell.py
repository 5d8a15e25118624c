"""
Tinkerbell API Router

Tinkerbell 드라이버를 통한 베어메탈 프로비저닝:
- Server 조회: Machine UID 로 점유된 Hardware
- Provision: Hardware 점유 + Template + Workflow
- Deprovision: Workflow/Hardware/Template 정리 및 점유 해제
- Validate: driverSpec 사전 검증
"""
import logging
from functools import lru_cache
from typing import Any, Dict, NoReturn, Optional

import yaml
from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError as PydanticValidationError

from core.config import settings
from core.errors import ConfigurationError, DriverError
from models.baremetal import MachineMeta, ProvisionRequest, ServerResponse, TinkerbellPluginSpec
from services.config_var import ConfigVarResolver
from services.tinkerbell import TinkerbellDriver, get_config, new_tinkerbell_driver
from utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/baremetal", tags=["baremetal"])


def load_driver_spec(path: str) -> TinkerbellPluginSpec:
    """driverSpec YAML 파일 로드

    파일 내용이 driverSpec 자체이거나 {"driverSpec": {...}} 형태 모두 허용
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to read driver spec {path}: {e}") from e

    if isinstance(raw, dict) and "driverSpec" in raw:
        raw = raw["driverSpec"]
    try:
        return TinkerbellPluginSpec.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(f"invalid driver spec {path}: {e}") from e


@lru_cache(maxsize=1)
def _build_driver() -> TinkerbellDriver:
    spec = load_driver_spec(settings.DRIVER_SPEC_PATH)
    tink_config = get_config(spec, ConfigVarResolver())
    return new_tinkerbell_driver(tink_config, spec)


def get_driver() -> TinkerbellDriver:
    """FastAPI 의존성: 설정된 드라이버 (최초 호출 시 1회 생성)"""
    try:
        return _build_driver()
    except DriverError as e:
        logger.error(f"Tinkerbell driver is not configured: {e}")
        raise HTTPException(status_code=503, detail=f"Tinkerbell driver is not configured: {e}")


def _new_context() -> CancellationToken:
    return CancellationToken.with_timeout(settings.OPERATION_TIMEOUT_SECONDS)


def _raise_http(e: DriverError, action: str) -> NoReturn:
    raise HTTPException(status_code=e.status_code, detail=f"Failed to {action}: {e}")


# ============================================
# 상태 API
# ============================================

@router.get("/status")
def get_tinkerbell_status(driver: TinkerbellDriver = Depends(get_driver)):
    """드라이버 설정 상태 조회"""
    return {
        "configured": True,
        "cluster_name": driver.config.cluster_name,
        "hardware_ref": str(driver.hardware_ref),
        "template_namespace": driver.template_namespace,
        "os_image_url": driver.config.os_image_url,
    }


# ============================================
# 서버 라이프사이클 API
# ============================================

@router.get("/servers/{uid}", response_model=ServerResponse)
def get_server(uid: str, name: str = "", driver: TinkerbellDriver = Depends(get_driver)):
    """Machine UID 로 점유된 서버 조회"""
    try:
        hardware = driver.get_server(MachineMeta(name=name, uid=uid), _new_context())
    except DriverError as e:
        _raise_http(e, "get server")
    return ServerResponse.from_hardware(hardware)


@router.post("/servers", response_model=ServerResponse)
def provision_server(request: ProvisionRequest, driver: TinkerbellDriver = Depends(get_driver)):
    """서버 프로비저닝 (Hardware 점유 → Template → Workflow)"""
    try:
        hardware = driver.provision_server(request.machine, request.userdata, _new_context())
    except DriverError as e:
        _raise_http(e, "provision server")
    return ServerResponse.from_hardware(hardware)


@router.post("/servers/deprovision")
def deprovision_server(machine: MachineMeta, driver: TinkerbellDriver = Depends(get_driver)):
    """서버 정리 및 점유 해제"""
    try:
        driver.deprovision_server(machine, _new_context())
    except DriverError as e:
        _raise_http(e, "deprovision server")
    return {"message": f"Machine {machine.name} deprovisioned", "uid": machine.uid}


@router.post("/validate")
def validate_spec(
    raw_spec: Optional[Dict[str, Any]] = Body(None),
    driver: TinkerbellDriver = Depends(get_driver),
):
    """driverSpec 사전 검증 (부수효과 없음)"""
    try:
        driver.validate(raw_spec)
    except DriverError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"valid": True}
