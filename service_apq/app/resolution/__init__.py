from .engine import ResolutionEngine

__all__ = ["ResolutionEngine"]
