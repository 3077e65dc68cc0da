"""fleetctl commands."""

from .set_tag import set_tag

__all__ = [
    "set_tag",
]
