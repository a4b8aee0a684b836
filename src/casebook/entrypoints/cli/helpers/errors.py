"""Translate Casebook errors into Click errors."""

from collections.abc import Iterator
from contextlib import contextmanager

import click

from casebook.domain.errors import CasebookError


class CasebookClickException(click.ClickException):
    """A ClickException that keeps the error kind in its message."""

    exit_code = 2

    def __init__(self, error: CasebookError) -> None:
        super().__init__(f"{error.error_kind.value}: {error}")
        self.error = error


@contextmanager
def casebook_errors() -> Iterator[None]:
    """Re-raise any `CasebookError` as a `CasebookClickException`."""
    try:
        yield
    except CasebookError as e:
        raise CasebookClickException(e) from e
