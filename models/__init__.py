# Pydantic models
from .baremetal import (
    NamespacedName, KeySelector, ConfigVarString, TinkerbellAuth,
    TinkerbellPluginSpec, TinkerbellConfig, MachineMeta, Hardware,
    ProvisionRequest, ServerResponse,
)

__all__ = [
    # driverSpec
    'NamespacedName', 'KeySelector', 'ConfigVarString', 'TinkerbellAuth',
    'TinkerbellPluginSpec', 'TinkerbellConfig',
    # Machine / Hardware
    'MachineMeta', 'Hardware',
    # API
    'ProvisionRequest', 'ServerResponse',
]
