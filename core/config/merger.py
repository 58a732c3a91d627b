"""Layer merging for configuration sources."""


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries. Override wins on conflicts, except that
    None in override means "not set" and leaves base alone.

    Args:
        base: Lower-priority layer
        override: Layer to merge on top

    Returns:
        New merged dictionary

    Example:
        base = {"mode": "file", "backends": {"keyring": {"service": "a"}}}
        override = {"mode": None, "backends": {"keyring": {"service": "b"}}}
        result = {"mode": "file", "backends": {"keyring": {"service": "b"}}}
    """
    result = base.copy()

    for key, value in override.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def merge_layers(*layers: dict) -> dict:
    """Merge layers left to right; later layers win."""
    result: dict = {}
    for layer in layers:
        result = deep_merge(result, layer or {})
    return result
