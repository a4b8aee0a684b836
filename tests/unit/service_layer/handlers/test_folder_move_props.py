"""Hypothesis property tests for moving folders.

Properties:

- **Cycle rule**: a move raises `CycleError` exactly when the new parent is
  the moved folder or lies beneath it; every other move succeeds. The root is
  above every folder, so moving it always raises.
- **Tree shape**: after any sequence of moves every folder reaches the project
  root by following parents, and siblings never share an order key.
"""

from __future__ import annotations

from collections import Counter

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from casebook.adapters.id_generators import SimpleIdGenerator
from casebook.bootstrap import bootstrap_in_memory
from casebook.domain.errors import CycleError
from casebook.domain.folders import subtree_ids
from casebook.service_layer import commands

pytestmark = [pytest.mark.property]

ACTOR = "tester"
FOLDER_COUNT = 6

moves = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=FOLDER_COUNT),  # folder (0 is the root)
        st.integers(min_value=0, max_value=FOLDER_COUNT),  # new parent
        st.none() | st.integers(min_value=0, max_value=FOLDER_COUNT),
    ),
    max_size=15,
)


def _build():
    app = bootstrap_in_memory(id_generator=SimpleIdGenerator(length=4))
    bus = app.message_bus
    project_id = bus.handle(commands.CreateProject(ACTOR, "Payments"))
    ids = [app.queries.projects.get(project_id).root_folder_id]
    for i in range(FOLDER_COUNT):
        ids.append(bus.handle(commands.CreateFolder(ACTOR, project_id, f"F{i}")))
    return app, project_id, ids


def _folders(app, project_id):
    uow = app.message_bus.uow
    with uow:
        return {f.folder_id: f for f in uow.repos.folders.list_project(project_id)}


@settings(max_examples=60, deadline=None)
@given(steps=moves)
def test_moves_follow_the_cycle_rule_and_keep_a_tree(steps):
    app, project_id, ids = _build()
    root_id = ids[0]

    for folder, parent, position in steps:
        folder_id, parent_id = ids[folder], ids[parent]
        expected_cycle = parent_id in subtree_ids(
            _folders(app, project_id), folder_id
        )
        cmd = commands.MoveFolder(ACTOR, folder_id, parent_id, position)
        if expected_cycle:
            with pytest.raises(CycleError):
                app.message_bus.handle(cmd)
        else:
            app.message_bus.handle(cmd)
            assert _folders(app, project_id)[folder_id].parent_id == parent_id

    folders = _folders(app, project_id)
    for folder_id in folders:
        seen = set()
        current = folders[folder_id]
        while current.parent_id is not None:
            assert current.folder_id not in seen
            seen.add(current.folder_id)
            current = folders[current.parent_id]
        assert current.folder_id == root_id

    keys = Counter((f.parent_id, f.order) for f in folders.values())
    assert max(keys.values()) == 1
