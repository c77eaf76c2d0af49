"""covsubmit - coverage report aggregation and Coveralls submission."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"
