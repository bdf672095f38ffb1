"""funcpack - package serverless function sources into deployable archives."""

__version__ = "0.4.0"
