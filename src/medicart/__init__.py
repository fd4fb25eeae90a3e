"""
Medicart medication cart and reminder package.

The package keeps a medication cart and a reminder list in a shared persistent
key-value store and keeps independently mounted surfaces in sync through an
explicit change notification bus.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
