"""Portfolio site backend: content API and rate-limited AI chat."""

__version__ = "1.0.0"
