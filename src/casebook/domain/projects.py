"""Project records."""

from dataclasses import dataclass
from datetime import datetime

from .errors import ValidationError


@dataclass(frozen=True, slots=True)
class Project:
    """Top-level tenant scope. Owns exactly one root folder."""

    project_id: str
    name: str
    root_folder_id: str
    created_at: datetime


def normalize_project_name(name: str, key: str) -> str:
    """Strip `name` and reject empty project names."""
    name = name.strip()
    if not name:
        raise ValidationError("project", key, "name must not be empty")
    return name
