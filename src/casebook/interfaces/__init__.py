"""Interfaces (application boundary) for Casebook.

Defines framework-free application contracts: ABCs and small write models
shared by the service layer and adapters (repositories, unit of work, id
generators, the permission predicate and label lookups). Business rules stay
in `casebook.domain`.

Dependency rule: this package may import `casebook.domain` only. It may be
imported by `casebook.service_layer`, `casebook.adapters`, and
`casebook.bootstrap`.
"""
