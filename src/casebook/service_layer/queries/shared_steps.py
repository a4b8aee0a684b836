"""Shared step group queries and placeholder expansion."""

from collections.abc import Sequence

from casebook.domain.errors import NotFoundError
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.value_objects import Step
from casebook.interfaces.unit_of_work import AbstractUnitOfWork


class SharedStepQueries:
    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    def list_active(self, project_id: str) -> list[SharedStepGroup]:
        with self.uow:
            return self.uow.repos.shared_steps.list_active(project_id)

    def get(self, group_id: str) -> SharedStepGroup:
        with self.uow:
            group = self.uow.repos.shared_steps.get(group_id)
        if group is None or not group.is_active:
            raise NotFoundError("shared_step_group", group_id)
        return group

    def expand_steps(self, steps: Sequence[Step]) -> tuple[Step, ...]:
        """Replace each placeholder by its group's steps.

        A placeholder whose group is missing or deleted is kept as is, so the
        caller can still show where the reference was.
        """
        expanded: list[Step] = []
        with self.uow:
            for step in steps:
                if step.shared_group_id is None:
                    expanded.append(step)
                    continue
                group = self.uow.repos.shared_steps.get(step.shared_group_id)
                if group is None or not group.is_active:
                    expanded.append(step)
                else:
                    expanded.extend(group.steps)
        return tuple(expanded)
