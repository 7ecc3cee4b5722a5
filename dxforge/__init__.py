"""Building blocks for DX tools: component detection, server pieces and storage."""

__version__ = "0.1.3"