"""
Tinkerbell 베어메탈 프로비저닝

- HardwareController: 하드웨어 점유/해제
- TemplateController: OS 설치 템플릿
- WorkflowController: 프로비저닝 워크플로우
- TinkerbellDriver: 위 세 컨트롤러를 순서대로 실행하는 드라이버
"""
from .config import get_config
from .driver import TinkerbellDriver, new_tinkerbell_driver
from .hardware import HardwareController
from .store import ResourceStore
from .template import TemplateController
from .workflow import WorkflowController, workflow_name_for

__all__ = [
    'get_config',
    'TinkerbellDriver', 'new_tinkerbell_driver',
    'HardwareController', 'TemplateController', 'WorkflowController',
    'ResourceStore', 'workflow_name_for',
]
