"""SceneIt engine: photo enhancement, opt-in gallery and usage analytics."""

__version__ = "0.1.0"
