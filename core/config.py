"""
Application configuration settings
"""
import os
from typing import List


class Settings:
    """Application settings"""

    # App
    APP_TITLE: str = "K3s Baremetal Driver API"
    APP_VERSION: str = "1.0.0"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Tinkerbell
    TEMPLATE_NAMESPACE: str = os.getenv("TEMPLATE_NAMESPACE", "tink-stack")
    DRIVER_SPEC_PATH: str = os.getenv("DRIVER_SPEC_PATH", "/etc/baremetal/driver-spec.yaml")

    # 스토어 호출 1회당 기본 타임아웃 (초)
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

    # Get/Provision/Deprovision 1회 전체 데드라인 (초)
    OPERATION_TIMEOUT_SECONDS: float = float(os.getenv("OPERATION_TIMEOUT_SECONDS", "300"))


settings = Settings()
