"""Activity logging package."""

from ea_manager.activity.logger import ActivityLogger

__all__ = ["ActivityLogger"]
