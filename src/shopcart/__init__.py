"""Shopping cart service: pure cart pricing rules behind a small Flask API."""

__version__ = "0.1.0"
