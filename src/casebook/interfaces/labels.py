"""Display labels for ids owned by external collaborators."""

import abc

# pylint: disable=too-few-public-methods


class LabelProvider(abc.ABC):
    """Resolve template, state, creator and custom-field option ids to labels.

    `namespace` is one of ``"template"``, ``"state"``, ``"creator"`` or
    ``"custom_fields.<field_id>"``. Implementations return None for unknown
    keys; callers fall back to the raw key.
    """

    @abc.abstractmethod
    def label_for(self, namespace: str, key: str) -> str | None:
        """Return the label for `key` in `namespace`, or None if unknown."""
