"""Storekeeper Admin with Unfold theme."""

__all__ = [
    "BaseModelAdmin",
    "BaseTabularInline",
    "format_quantity",
    "format_money",
]


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name in __all__:
        from storekeeper.contrib.admin_unfold import base
        return getattr(base, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
