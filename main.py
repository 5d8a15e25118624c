"""
K3s 베어메탈 드라이버 백엔드 API

API 구조:
- /api/baremetal/*   - Tinkerbell 베어메탈 프로비저닝 (서버 조회/프로비저닝/정리/검증)
- /api/health        - 헬스체크
- /api/k8s/health    - 하드웨어 풀 클러스터 연결 확인
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from routers import tinkerbell_router, health_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# ============================================
# 라우터 등록
# ============================================
app.include_router(health_router)
app.include_router(tinkerbell_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
