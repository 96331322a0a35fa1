"""campuscoffee — directory of campus coffee Points of Sale."""

__version__ = "0.1.0"
