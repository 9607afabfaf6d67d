class ConfigurationError(Exception):
    """Raised when required pipeline configuration is missing or invalid."""
