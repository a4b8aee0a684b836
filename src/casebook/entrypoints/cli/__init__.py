"""The ``casebook`` command line."""
