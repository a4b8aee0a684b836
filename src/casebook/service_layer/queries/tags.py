"""Tag queries."""

from casebook.domain.errors import NotFoundError
from casebook.domain.tags import Tag
from casebook.interfaces.unit_of_work import AbstractUnitOfWork


class TagQueries:
    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    def list_active(self) -> list[Tag]:
        with self.uow:
            return self.uow.repos.tags.list_active()

    def get(self, tag_id: str) -> Tag:
        with self.uow:
            tag = self.uow.repos.tags.get(tag_id)
        if tag is None or not tag.is_active:
            raise NotFoundError("tag", tag_id)
        return tag

    def usage(self, tag_id: str) -> int:
        """Number of active artifacts carrying the tag."""
        with self.uow:
            tag = self.uow.repos.tags.get(tag_id)
            if tag is None:
                raise NotFoundError("tag", tag_id)
            return self.uow.repos.artifacts.count_with_tag(tag_id)
