# Domain Package
from .cache import CompletionCache
from .models import Difficulty, Record

__all__ = ["CompletionCache", "Difficulty", "Record"]
