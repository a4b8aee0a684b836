"""Bootstrap (composition root) for CASEBOOK.

Assembles the application at runtime: wires concrete adapters to service-layer
handlers (commands) and query facades, composes shared services (message bus,
unit of work, view engine), reads configuration, and exposes one container for
entrypoints.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `casebook.adapters`, `casebook.service_layer`,
  `casebook.interfaces`, `casebook.domain`, and `casebook.config`.
- Inner layers must not import `casebook.bootstrap`.

Public surface:
- Re-export composition factories from this module; keep wiring helpers internal.
- No business rules live here; this is assembly and lifecycle only.
"""

from .bootstrap import AppContainer, bootstrap, bootstrap_in_memory

__all__ = ["AppContainer", "bootstrap", "bootstrap_in_memory"]
