from .loader import AnalyzerConfig, ConfigError, load_config

__all__ = ["AnalyzerConfig", "ConfigError", "load_config"]
