"""swiftgraft: splice AI-generated docs, reviews and fixes into Swift sources."""

__version__ = "0.3.0"

__all__ = ["__version__"]
