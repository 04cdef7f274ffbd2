"""tripsaas: tenant resolution and request-scoped authorization."""

__version__ = "0.1.0"
