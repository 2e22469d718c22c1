from .view_tracker import ViewTracker


__all__ = ["ViewTracker"]
