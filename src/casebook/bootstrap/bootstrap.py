"""Bootstrap the message bus, queries and view engine around a unit of work."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from casebook import config
from casebook.adapters.db.engine import make_engine
from casebook.adapters.id_generators import ULIDGenerator
from casebook.adapters.labels import DictLabelProvider
from casebook.adapters.memory import InMemoryUnitOfWork
from casebook.adapters.permissions import AllowAllPermissions
from casebook.adapters.unit_of_work import SqlAlchemyUnitOfWork
from casebook.interfaces.id_generator import IdGenerator
from casebook.interfaces.labels import LabelProvider
from casebook.interfaces.permissions import PermissionChecker
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer.handlers import COMMAND_HANDLERS
from casebook.service_layer.messagebus import MessageBus
from casebook.service_layer.queries import Queries
from casebook.service_layer.views import ViewEngine

if TYPE_CHECKING:
    from casebook.service_layer.commands import Command


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    message_bus: MessageBus
    queries: Queries
    views: ViewEngine


def build_write_uow(url: str) -> AbstractUnitOfWork:
    """Build a new unit of work for write operations."""
    engine = make_engine(url)
    return SqlAlchemyUnitOfWork(engine)


def build_message_bus(
    uow: AbstractUnitOfWork,
    command_handlers: dict[type[Command], Callable[..., object]],
    *,
    id_generator: IdGenerator,
    permissions: PermissionChecker,
) -> MessageBus:
    """Build a message bus with injected dependencies."""
    dependencies = {
        "uow": uow,
        "id_generator": id_generator,
        "permissions": permissions,
    }
    injected_command_handlers = {
        command_type: inject_dependencies(handler, dependencies)
        for command_type, handler in command_handlers.items()
    }

    return MessageBus(
        uow,
        command_handlers=injected_command_handlers,
    )


def _assemble(
    uow: AbstractUnitOfWork,
    *,
    id_generator: IdGenerator | None,
    permissions: PermissionChecker | None,
    labels: LabelProvider | None,
    page_size: int,
) -> AppContainer:
    message_bus = build_message_bus(
        uow,
        COMMAND_HANDLERS,
        id_generator=id_generator or ULIDGenerator(),
        permissions=permissions or AllowAllPermissions(),
    )
    return AppContainer(
        message_bus=message_bus,
        queries=Queries.over(uow),
        views=ViewEngine(uow, labels or DictLabelProvider(), page_size=page_size),
    )


def bootstrap(
    db_url: str | None = None,
    *,
    id_generator: IdGenerator | None = None,
    permissions: PermissionChecker | None = None,
    labels: LabelProvider | None = None,
) -> AppContainer:
    """Bootstrap the application over the configured database.

    Args:
        db_url: SQLAlchemy URL; defaults to `CASEBOOK_DB_URL`.
        id_generator: Defaults to monotonic ULIDs.
        permissions: Defaults to allowing every action.
        labels: Display labels for views; defaults to raw ids.
    """
    uow = build_write_uow(db_url or config.get_db_url())
    return _assemble(
        uow,
        id_generator=id_generator,
        permissions=permissions,
        labels=labels,
        page_size=config.get_page_size(),
    )


def bootstrap_in_memory(
    *,
    id_generator: IdGenerator | None = None,
    permissions: PermissionChecker | None = None,
    labels: LabelProvider | None = None,
) -> AppContainer:
    """Bootstrap the application over a fresh in-memory store."""
    return _assemble(
        InMemoryUnitOfWork(),
        id_generator=id_generator,
        permissions=permissions,
        labels=labels,
        page_size=config.get_page_size(),
    )


def inject_dependencies(
    handler: Callable, dependencies: Mapping[str, object]
) -> Callable:
    """Inject dependencies into a handler function based on its parameters."""
    params = inspect.signature(handler).parameters
    deps = {
        name: dependency for name, dependency in dependencies.items() if name in params
    }
    return functools.partial(handler, **deps)
