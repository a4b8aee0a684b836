"""CASEBOOK

A versioned, hierarchical repository of test artifacts. Test cases live in a
folder tree, every content edit is kept as an immutable numbered version, and
a dynamic view engine groups, filters and counts cases along arbitrary
dimensions.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
