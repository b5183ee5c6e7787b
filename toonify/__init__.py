"""Template-guided photo stylization: line-art outlines and posterized illustrations."""

__version__ = "1.0.0"
