"""Saved-cities weather app: FastAPI server plus terminal views."""

__version__ = "1.0.0"
