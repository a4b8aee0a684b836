"""Unit tests for casebook.interfaces.unsettable and the repository patches."""

import pickle
import re
from datetime import datetime, timezone

import pytest

from casebook.domain.errors import ValidationError
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.value_objects import FieldKind, FieldValue, Step
from casebook.interfaces.repositories import (
    ArtifactPatch,
    FolderPatch,
    SharedStepGroupPatch,
)
from casebook.interfaces.unsettable import UNSET, is_unset, resolve

# --- Tests for _UnsetType singleton ---


def test_unset_is_falsy():
    """UNSET evaluates to False in boolean contexts."""
    assert not UNSET


def test_unset_repr():
    """UNSET has the expected repr string."""
    assert repr(UNSET) == "UNSET"


def test_unset_is_singleton():
    """UNSET remains identical after pickling and unpickling."""
    assert pickle.loads(pickle.dumps(UNSET)) is UNSET
    assert is_unset(UNSET)
    assert not is_unset(None)


# --- Tests for resolve ---


def test_resolve_unset_returns_current():
    """resolve(UNSET, ...) returns the current value."""
    result = resolve(
        UNSET, "Smoke", clearable=False, field="name", kind="tag", key="T1"
    )
    assert result == "Smoke"


def test_resolve_none_clears_value_when_clearable():
    """resolve(None, ...) returns None when clearable=True."""
    result = resolve(
        None, "st-open", clearable=True, field="state_id", kind="artifact", key="A1"
    )
    assert result is None


def test_resolve_none_raises_when_not_clearable():
    """resolve(None, ...) raises ValidationError when clearable=False."""
    with pytest.raises(
        ValidationError,
        match=re.escape("Invalid folder (F1): name cannot be cleared"),
    ):
        resolve(None, "Auth", clearable=False, field="name", kind="folder", key="F1")


def test_resolve_concrete_value_returns_value():
    """resolve(concrete_value, ...) returns the concrete value."""
    result = resolve(
        "Checkout", "Auth", clearable=False, field="name", kind="folder", key="F1"
    )
    assert result == "Checkout"


# --- ArtifactPatch ---


class TestArtifactPatch:
    """Applying partial updates to artifact content."""

    @staticmethod
    def test_empty_patch_is_identity(make_content) -> None:
        content = make_content(state_id="open")
        patch = ArtifactPatch()
        assert patch.is_empty
        assert patch.apply_to(content, "A1") == content

    @staticmethod
    def test_state_and_estimate_can_be_cleared(make_content) -> None:
        content = make_content(state_id="open", estimate=30)
        patched = ArtifactPatch(state_id=None, estimate=None).apply_to(content, "A1")
        assert patched.state_id is None
        assert patched.estimate is None

    @staticmethod
    def test_template_cannot_be_cleared(make_content) -> None:
        with pytest.raises(ValidationError):
            ArtifactPatch(template_id=None).apply_to(make_content(), "A1")

    @staticmethod
    def test_custom_fields_are_merged(make_content) -> None:
        content = make_content(
            custom_fields={
                "prio": FieldValue(FieldKind.DROPDOWN, "high"),
                "ticket": FieldValue(FieldKind.TEXT, "CB-1"),
            }
        )
        patch = ArtifactPatch(
            custom_fields={
                "prio": FieldValue(FieldKind.DROPDOWN, "low"),
                "ticket": None,
                "smoke": FieldValue(FieldKind.CHECKBOX, True),
            }
        )
        assert not patch.is_empty
        assert patch.apply_to(content, "A1").custom_fields == {
            "prio": FieldValue(FieldKind.DROPDOWN, "low"),
            "smoke": FieldValue(FieldKind.CHECKBOX, True),
        }

    @staticmethod
    def test_steps_are_replaced_wholesale(make_content) -> None:
        content = make_content(steps=(Step("a"), Step("b")))
        patched = ArtifactPatch(steps=[Step("c")]).apply_to(content, "A1")
        assert patched.steps == (Step("c"),)


# --- FolderPatch / SharedStepGroupPatch ---


def test_folder_patch_normalizes_name_and_clears_documentation(make_records):
    project, root = make_records.project()
    folder = make_records.folder(project, root, "Auth")
    folder = FolderPatch(documentation="About auth").apply_to(folder)
    assert folder.documentation == "About auth"

    patched = FolderPatch(name="  Sign in ", documentation=None).apply_to(folder)
    assert patched.name == "Sign in"
    assert patched.documentation is None


def test_folder_patch_rejects_short_names(make_records):
    project, root = make_records.project()
    folder = make_records.folder(project, root, "Auth")
    with pytest.raises(ValidationError):
        FolderPatch(name="x").apply_to(folder)


def test_shared_step_group_patch(make_records):
    project, _ = make_records.project()
    group = SharedStepGroup(
        "G1", project.project_id, "Login", (Step("a"),), datetime.now(timezone.utc)
    )
    patched = SharedStepGroupPatch(steps=[Step("b")]).apply_to(group)
    assert patched.steps == (Step("b"),)
    assert patched.name == "Login"
    with pytest.raises(ValidationError):
        SharedStepGroupPatch(steps=[Step(shared_group_id="G2")]).apply_to(group)
