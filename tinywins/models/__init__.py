from .celebration import CelebrationRecord

__all__ = [
    "CelebrationRecord",
]
