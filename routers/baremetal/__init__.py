"""
베어메탈 프로비저닝 라우터

Tinkerbell 기반 베어메탈 서버 관리:
- 서버 조회 (Machine UID 로 점유된 Hardware)
- 프로비저닝 / 정리
- driverSpec 검증
"""
from .tinkerbell import router as tinkerbell_router

__all__ = ['tinkerbell_router']
