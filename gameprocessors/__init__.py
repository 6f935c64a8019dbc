from .base import GameProcessor
from .factory import PROCESSORS, get_processor, get_processor_class

__all__ = [
    "GameProcessor",
    "PROCESSORS",
    "get_processor",
    "get_processor_class",
]
