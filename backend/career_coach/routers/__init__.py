from . import (
    health,
    interviews,
    profile,
)

__all__ = [
    "health",
    "interviews",
    "profile",
]
