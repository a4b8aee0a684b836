"""Hypothesis property tests for version diffs.

Properties:

- **Reflexivity**: a content compared with itself has no changes, and every
  record is UNCHANGED when unchanged fields are requested.
- **Step accounting**: every step of the newer list appears exactly once, in
  order, and every unmatched older step is reported as removed.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from casebook.domain.artifacts import ArtifactContent
from casebook.domain.diff import ChangeKind, diff_contents, diff_steps
from casebook.domain.value_objects import Step

pytestmark = [pytest.mark.property]

texts = st.text(
    alphabet=st.characters(categories=("L", "N")), min_size=1, max_size=8
)
plain_steps = st.builds(Step, action=texts, expected_result=st.none() | texts)

contents = st.builds(
    ArtifactContent,
    name=texts,
    template_id=texts,
    state_id=st.none() | texts,
    automated=st.booleans(),
    estimate=st.none() | st.integers(min_value=0, max_value=10_000),
    steps=st.lists(plain_steps, max_size=5).map(tuple),
)


@given(content=contents)
def test_content_has_no_changes_against_itself(content):
    assert not diff_contents(content, content)
    every = diff_contents(content, content, include_unchanged=True)
    assert every
    assert {change.kind for change in every} == {ChangeKind.UNCHANGED}


@given(
    old=st.lists(plain_steps, max_size=6),
    new=st.lists(plain_steps, max_size=6),
)
def test_steps_without_ids_align_by_index(old, new):
    changes = diff_steps(old, new)

    kept = [c for c in changes if c.kind is not ChangeKind.REMOVED]
    assert [c.position for c in kept] == list(range(len(new)))
    assert [c.new_value for c in kept] == new

    removed = [c for c in changes if c.kind is ChangeKind.REMOVED]
    assert [c.position for c in removed] == list(range(len(new), len(old)))
    assert all(c.kind is ChangeKind.ADDED for c in kept[len(old) :])


@given(steps=st.lists(texts, unique=True, max_size=6), data=st.data())
def test_reordered_steps_with_ids_are_never_added(steps, data):
    old = [Step(action=s, step_id=s) for s in steps]
    new = data.draw(st.permutations(old))

    changes = diff_steps(old, new)
    assert len(changes) == len(old)
    assert {c.kind for c in changes} <= {ChangeKind.UNCHANGED}
