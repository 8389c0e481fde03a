from .background import BackgroundTaskGroup

__all__ = ["BackgroundTaskGroup"]
