# Business logic services
from .config_var import ConfigVarResolver
from .tinkerbell import TinkerbellDriver, get_config, new_tinkerbell_driver

__all__ = ['ConfigVarResolver', 'TinkerbellDriver', 'get_config', 'new_tinkerbell_driver']
