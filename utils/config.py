"""
전역 상수

Tinkerbell CRD 좌표, 환경변수 폴백 키, 어노테이션 키
"""

# Tinkerbell CRD 정보
TINKERBELL_GROUP = "tinkerbell.org"
TINKERBELL_VERSION = "v1alpha1"

HARDWARE_KIND = "Hardware"
TEMPLATE_KIND = "Template"
WORKFLOW_KIND = "Workflow"

# driverSpec 필드가 비어있을 때 조회하는 환경변수 이름
ENV_KUBECONFIG = "TINK_KUBECONFIG"
ENV_CLUSTER_NAME = "CLUSTER_NAME"
ENV_OS_IMAGE_URL = "OS_IMAGE_URL"
ENV_HEGEL_URL = "HEGEL_URL"

# Template 생성 파라미터 기록용 어노테이션
ANNOTATION_PREFIX = "baremetal.k3s.io/"
ANNOTATION_OS_IMAGE_URL = ANNOTATION_PREFIX + "os-image-url"
ANNOTATION_METADATA_URL = ANNOTATION_PREFIX + "metadata-url"
LABEL_MANAGED_BY = ANNOTATION_PREFIX + "managed-by"
MANAGED_BY = "tinkerbell-driver"

WORKFLOW_NAME_SUFFIX = "-workflow"

# Workflow hardwareMap 에서 사용하는 디바이스 키
WORKFLOW_DEVICE_KEY = "device_1"
