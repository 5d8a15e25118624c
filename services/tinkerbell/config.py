"""
Tinkerbell 드라이버 설정 해석

driverSpec + 값 조회 함수 → TinkerbellConfig

kubeconfig 는 두 경로로 들어온다:
- driverSpec 에 직접 지정: 반드시 base64 인코딩
- 비어있음: 조회 함수(환경변수/Secret 참조)로 가져오며 인코딩 없이 평문 허용
"""
import base64
import binascii
import logging
from typing import Callable

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from core.errors import (
    ClientConfigurationError,
    ConfigVarResolutionError,
    InvalidKubeconfigEncodingError,
)
from models.baremetal import ConfigVarString, TinkerbellConfig, TinkerbellPluginSpec
from utils.config import ENV_KUBECONFIG, ENV_CLUSTER_NAME, ENV_OS_IMAGE_URL, ENV_HEGEL_URL

logger = logging.getLogger(__name__)

# (ConfigVarString, 환경변수 이름) -> 값
ConfigVarLookup = Callable[[ConfigVarString, str], str]


def decode_embedded_kubeconfig(value: str) -> str:
    """driverSpec 에 직접 넣은 base64 kubeconfig 디코딩"""
    # 줄바꿈은 무시 (base64 -w76 출력 허용)
    compact = value.replace("\n", "").replace("\r", "")
    try:
        return base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise InvalidKubeconfigEncodingError(
            "failed to decode base64 encoded kubeconfig. "
            f"Expected value is a base64 encoded Kubeconfig in JSON or YAML format: {e}"
        ) from e


def build_client_configuration(kubeconfig: str) -> client.Configuration:
    """kubeconfig(YAML/JSON) 로부터 kubernetes.client.Configuration 생성"""
    try:
        config_dict = yaml.safe_load(kubeconfig)
    except yaml.YAMLError as e:
        raise ClientConfigurationError(f"failed to decode kubeconfig: {e}") from e

    if not isinstance(config_dict, dict):
        raise ClientConfigurationError("failed to decode kubeconfig: document is not a kubeconfig mapping")

    configuration = client.Configuration()
    try:
        config.load_kube_config_from_dict(
            config_dict=config_dict,
            client_configuration=configuration,
            persist_config=False,
        )
    except (config.ConfigException, KeyError, TypeError, ValueError) as e:
        raise ClientConfigurationError(f"failed to decode kubeconfig: {e}") from e
    return configuration


def _resolve(lookup: ConfigVarLookup, var: ConfigVarString, env_name: str, field: str) -> str:
    try:
        return lookup(var, env_name)
    except ConfigVarResolutionError:
        raise
    except (ApiException, LookupError, OSError, RuntimeError, ValueError) as e:
        raise ConfigVarResolutionError(f'failed to get value of "{field}" field: {e}') from e


def get_config(driver_spec: TinkerbellPluginSpec, lookup: ConfigVarLookup) -> TinkerbellConfig:
    """driverSpec 해석

    Raises:
        InvalidKubeconfigEncodingError: 직접 지정한 kubeconfig 가 base64 가 아님
        ConfigVarResolutionError: 조회 함수 실패
        ClientConfigurationError: kubeconfig 로 클라이언트 설정을 만들 수 없음
    """
    kubeconfig_var = driver_spec.auth.kubeconfig
    if kubeconfig_var.value:
        kubeconfig = decode_embedded_kubeconfig(kubeconfig_var.value)
    else:
        # 환경변수/Secret 참조는 평문도 허용
        kubeconfig = _resolve(lookup, kubeconfig_var, ENV_KUBECONFIG, "kubeconfig")

    cluster_name = _resolve(lookup, driver_spec.cluster_name, ENV_CLUSTER_NAME, "clusterName")
    os_image_url = _resolve(lookup, driver_spec.os_image_url, ENV_OS_IMAGE_URL, "osImageUrl")
    hegel_url = _resolve(lookup, driver_spec.hegel_url, ENV_HEGEL_URL, "hegelUrl")

    client_configuration = build_client_configuration(kubeconfig)
    logger.info(f"Tinkerbell config resolved (cluster={cluster_name}, host={client_configuration.host})")

    return TinkerbellConfig(
        kubeconfig=kubeconfig,
        cluster_name=cluster_name,
        os_image_url=os_image_url,
        hegel_url=hegel_url,
        client_configuration=client_configuration,
    )
