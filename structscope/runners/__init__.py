"""Loop drivers for live and recorded scenes."""

from .loop import DetectionLoop, SceneState

__all__ = ["DetectionLoop", "SceneState"]
