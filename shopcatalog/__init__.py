"""Shop catalog: category taxonomy and product search."""

__version__ = "0.1.0"
