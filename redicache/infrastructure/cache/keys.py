"""Physical key helpers. Single place for prefixing (DRY).

A physical key is the configured prefix followed by the logical key,
with no separator added; callers own uniqueness of their logical keys.
"""


def physical_key(prefix: str, key: str) -> str:
    """Return the backend key for a logical key."""
    return f"{prefix}{key}"


def physical_keys(prefix: str, keys: tuple[str, ...] | list[str]) -> list[str]:
    """Prefix every logical key."""
    return [physical_key(prefix, k) for k in keys]


def logical_key(prefix: str, key: str) -> str:
    """Strip prefix from a physical key.

    Keys that do not start with prefix are returned unchanged.
    """
    if prefix and key.startswith(prefix):
        return key[len(prefix) :]
    return key
