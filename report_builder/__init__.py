"""Report builder: configuration model, SQL synthesis and the catalog API."""

__version__ = "1.0.0"
