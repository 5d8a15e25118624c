"""
베어메탈 프로비저닝 모델

driverSpec (MachineDeployment 의 cloudProviderSpec.driverSpec):
- ConfigVarString: 직접 값 / Secret 참조 / ConfigMap 참조 / 환경변수 폴백
- TinkerbellPluginSpec: clusterName, osImageUrl, hegelUrl, auth, hardwareRef

Tinkerbell CRD 기반:
- Hardware: 스토어 오브젝트 사본을 감싼 서버 디스크립터
"""
import copy
from pydantic import BaseModel, Field, model_validator
from typing import Optional, Dict, Any


class NamespacedName(BaseModel):
    """네임스페이스 + 이름"""
    name: str = Field(default="", description="리소스 이름")
    namespace: str = Field(default="", description="네임스페이스")

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class KeySelector(BaseModel):
    """Secret / ConfigMap 의 특정 키 참조"""
    namespace: str = Field(default="", description="네임스페이스")
    name: str = Field(default="", description="Secret/ConfigMap 이름")
    key: str = Field(default="", description="데이터 키")


class ConfigVarString(BaseModel):
    """문자열 설정값: 직접 값 또는 Secret/ConfigMap 참조

    YAML 에서 문자열만 쓰면 value 로 취급한다.
    """
    model_config = {"populate_by_name": True, "extra": "ignore"}

    value: str = Field(default="", description="직접 지정한 값")
    secret_key_ref: Optional[KeySelector] = Field(None, alias="secretKeyRef")
    config_map_key_ref: Optional[KeySelector] = Field(None, alias="configMapKeyRef")

    @model_validator(mode="before")
    @classmethod
    def _from_plain_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"value": data}
        return data


class TinkerbellAuth(BaseModel):
    """Tinkerbell 클러스터 인증 정보"""
    kubeconfig: ConfigVarString = Field(default_factory=ConfigVarString)


class TinkerbellPluginSpec(BaseModel):
    """Tinkerbell 드라이버 스펙 (driverSpec)"""
    model_config = {"populate_by_name": True, "extra": "ignore"}

    cluster_name: ConfigVarString = Field(default_factory=ConfigVarString, alias="clusterName")
    os_image_url: ConfigVarString = Field(default_factory=ConfigVarString, alias="osImageUrl")
    hegel_url: ConfigVarString = Field(default_factory=ConfigVarString, alias="hegelUrl")
    auth: TinkerbellAuth = Field(default_factory=TinkerbellAuth)
    hardware_ref: NamespacedName = Field(default_factory=NamespacedName, alias="hardwareRef")


class TinkerbellConfig(BaseModel):
    """해석이 끝난 접속/프로비저닝 설정"""
    model_config = {"arbitrary_types_allowed": True}

    kubeconfig: str = Field(default="", description="Tinkerbell 클러스터 kubeconfig (평문)")
    cluster_name: str = Field(default="", description="클러스터 이름")
    os_image_url: str = Field(default="", description="OS 이미지 URL")
    hegel_url: str = Field(default="", description="메타데이터 서비스(Hegel) URL")
    # kubernetes.client.Configuration
    client_configuration: Optional[Any] = None


class MachineMeta(BaseModel):
    """프로비저닝을 요청한 워크로드(Machine) 식별 정보"""
    name: str = Field(..., description="Machine 이름 (Template 이름으로 사용)")
    namespace: str = Field(default="", description="Machine 네임스페이스")
    uid: str = Field(..., min_length=1, description="Machine UID (하드웨어 점유 ID)")


class Hardware(BaseModel):
    """Tinkerbell Hardware 오브젝트 래퍼

    스토어 오브젝트의 사본(raw)을 소유하고 필요한 필드만 접근자로 노출한다.
    점유 ID 는 spec.metadata.instance.id, userdata 는 spec.userData 에 있다.
    """
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: Dict[str, Any]) -> "Hardware":
        return cls(raw=copy.deepcopy(obj))

    def to_object(self) -> Dict[str, Any]:
        return copy.deepcopy(self.raw)

    @property
    def name(self) -> str:
        return self.raw.get("metadata", {}).get("name", "")

    @property
    def namespace(self) -> str:
        return self.raw.get("metadata", {}).get("namespace", "")

    @property
    def resource_version(self) -> str:
        return self.raw.get("metadata", {}).get("resourceVersion", "")

    @property
    def id(self) -> str:
        """점유 ID (비어있으면 미점유)"""
        instance = self.raw.get("spec", {}).get("metadata", {}).get("instance") or {}
        return instance.get("id", "")

    @property
    def user_data(self) -> str:
        return self.raw.get("spec", {}).get("userData") or ""

    @property
    def state(self) -> str:
        return self.raw.get("spec", {}).get("metadata", {}).get("state", "")

    @property
    def mac_address(self) -> str:
        for iface in self.raw.get("spec", {}).get("interfaces", []):
            mac = iface.get("dhcp", {}).get("mac")
            if mac:
                return mac
        return ""

    @property
    def ip_address(self) -> str:
        for iface in self.raw.get("spec", {}).get("interfaces", []):
            address = iface.get("dhcp", {}).get("ip", {}).get("address")
            if address:
                return address
        return ""

    def set_id(self, uid: str) -> None:
        spec = self.raw.setdefault("spec", {})
        metadata = spec.setdefault("metadata", {})
        instance = metadata.get("instance") or {}
        instance["id"] = uid
        metadata["instance"] = instance

    def set_user_data(self, user_data: str) -> None:
        self.raw.setdefault("spec", {})["userData"] = user_data


# ============================================
# API 요청/응답
# ============================================

class ProvisionRequest(BaseModel):
    """프로비저닝 요청"""
    machine: MachineMeta
    userdata: str = Field(default="", description="부팅 시 전달할 userdata")


class ServerResponse(BaseModel):
    """프로비저닝된 서버 정보"""
    name: str
    namespace: str
    id: str = Field(default="", description="점유 ID (Machine UID)")
    mac_address: str = ""
    ip_address: str = ""
    state: str = ""

    @classmethod
    def from_hardware(cls, hardware: Hardware) -> "ServerResponse":
        return cls(
            name=hardware.name,
            namespace=hardware.namespace,
            id=hardware.id,
            mac_address=hardware.mac_address,
            ip_address=hardware.ip_address,
            state=hardware.state,
        )
