"""Design Catalog: component extraction and design-system snapshot diffing."""

__version__ = "1.0.0"
