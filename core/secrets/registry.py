"""Secret-store backend registry with decorator pattern."""

BACKENDS = {}


def register_backend(name: str):
    """
    Decorator to register a backend class.

    Usage:
        @register_backend("secret-tool")
        class SecretToolBackend(SecretBackend):
            ...
    """

    def decorator(cls):
        BACKENDS[name] = cls
        return cls

    return decorator


def get_backend(name: str):
    """
    Get backend class by name.

    Args:
        name: Backend identifier (secret-tool, keyring, ...)

    Returns:
        Backend class (not instance)

    Raises:
        KeyError: If backend not registered
    """
    if name not in BACKENDS:
        available = ", ".join(sorted(BACKENDS)) or "none"
        raise KeyError(f"Unknown backend: '{name}'. Available: {available}")
    return BACKENDS[name]


def available_backends() -> list:
    """Names of all registered backends, sorted."""
    return sorted(BACKENDS)
