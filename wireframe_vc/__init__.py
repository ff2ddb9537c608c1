"""Version control and structural diff service for wireframe documents."""

__version__ = "1.0.0"
