"""Domain layer for Casebook.

Records, value objects, ordering policy and the version diff engine. Nothing
in this package performs I/O.
"""
