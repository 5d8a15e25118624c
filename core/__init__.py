# Core module - configuration, errors, resource registry
from .config import settings
from .errors import (
    DriverError,
    ConfigurationError,
    NotFoundError,
    HardwareNotFoundError,
    ConflictError,
    ValidationError,
    StepFailedError,
)

__all__ = [
    'settings',
    'DriverError',
    'ConfigurationError',
    'NotFoundError',
    'HardwareNotFoundError',
    'ConflictError',
    'ValidationError',
    'StepFailedError',
]
