from ._config import SamplingConfig
from ._config import config


__all__ = ["SamplingConfig", "config"]
