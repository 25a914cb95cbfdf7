"""
Tradelytics - Trading Performance Analytics

Public API for turning journaled trade executions into performance statistics.
"""

from importlib.metadata import version

try:
    __version__ = version("tradelytics")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
