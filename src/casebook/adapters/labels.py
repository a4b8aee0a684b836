"""Label provider adapters."""

from collections.abc import Mapping

from casebook.interfaces.labels import LabelProvider

# pylint: disable=too-few-public-methods


class DictLabelProvider(LabelProvider):
    """Labels from a ``{namespace: {key: label}}`` mapping."""

    def __init__(self, labels: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._labels = {ns: dict(entries) for ns, entries in (labels or {}).items()}

    def label_for(self, namespace: str, key: str) -> str | None:
        return self._labels.get(namespace, {}).get(key)
