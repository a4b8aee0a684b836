"""Entrypoints (inbound adapters) for CASEBOOK.

Expose the application to the outside world. Today that is the ``casebook``
command line. Entrypoints parse and validate inputs, go through
`casebook.bootstrap` to reach the service layer, and present results.

Dependency rule: may import `casebook.bootstrap`, `casebook.service_layer` and
`casebook.domain`; avoid importing `casebook.adapters` directly (the ``db``
group's engine probe is the one exception).
"""
