"""
ConfigVarString 값 조회

우선순위:
1. value (직접 지정)
2. secretKeyRef (Secret data, K8s 저장 형식인 base64 를 풀어서 반환)
3. configMapKeyRef
4. 환경변수 (없으면 빈 문자열)
"""
import base64
import binascii
import logging
import os

from kubernetes.client.rest import ApiException

from core.errors import ConfigVarResolutionError
from models.baremetal import ConfigVarString, KeySelector
from utils.k8s_client import get_core_v1_api

logger = logging.getLogger(__name__)


class ConfigVarResolver:
    """get_config() 에 넘기는 기본 조회 함수

    Example:
        >>> resolver = ConfigVarResolver()
        >>> tink_config = get_config(driver_spec, resolver)
    """

    def __init__(self, core_v1=None):
        self._core_v1 = core_v1

    @property
    def core_v1(self):
        # 참조를 실제로 쓸 때만 클러스터 설정 로드
        if self._core_v1 is None:
            self._core_v1 = get_core_v1_api()
        return self._core_v1

    def __call__(self, var: ConfigVarString, env_name: str) -> str:
        if var.value:
            return var.value
        if var.secret_key_ref is not None and var.secret_key_ref.name:
            return self._from_secret(var.secret_key_ref)
        if var.config_map_key_ref is not None and var.config_map_key_ref.name:
            return self._from_config_map(var.config_map_key_ref)
        return os.environ.get(env_name, "")

    def _from_secret(self, ref: KeySelector) -> str:
        try:
            secret = self.core_v1.read_namespaced_secret(name=ref.name, namespace=ref.namespace)
        except ApiException as e:
            raise ConfigVarResolutionError(
                f"failed to read secret {ref.namespace}/{ref.name}: {e.reason}"
            ) from e

        data = secret.data or {}
        if ref.key not in data:
            raise ConfigVarResolutionError(f"secret {ref.namespace}/{ref.name} has no key {ref.key!r}")
        try:
            return base64.b64decode(data[ref.key]).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ConfigVarResolutionError(
                f"secret {ref.namespace}/{ref.name} key {ref.key!r} is not valid data: {e}"
            ) from e

    def _from_config_map(self, ref: KeySelector) -> str:
        try:
            config_map = self.core_v1.read_namespaced_config_map(name=ref.name, namespace=ref.namespace)
        except ApiException as e:
            raise ConfigVarResolutionError(
                f"failed to read configmap {ref.namespace}/{ref.name}: {e.reason}"
            ) from e

        data = config_map.data or {}
        if ref.key not in data:
            raise ConfigVarResolutionError(f"configmap {ref.namespace}/{ref.name} has no key {ref.key!r}")
        return data[ref.key]
