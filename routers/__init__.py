"""
API Routers - 기능별 모듈화

디렉터리 구조:
- baremetal/ : Tinkerbell 베어메탈 프로비저닝
- health     : 헬스체크
"""

from .baremetal import tinkerbell_router
from .health import router as health_router

__all__ = [
    'tinkerbell_router',
    'health_router',
]
