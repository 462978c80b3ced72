from .run import ConfigRunResult, integrate_from_config

__all__ = ["ConfigRunResult", "integrate_from_config"]
