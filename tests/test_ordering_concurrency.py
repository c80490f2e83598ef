"""
Feature: Serialize concurrent writers on one scope
  As two users reordering the same column at the same time
  I want the loser of the race to re-read and retry
  So that positions are never duplicated or skipped

Scenario: A competing move commits between read and write
  Given column [A, B, C, D]
  When another writer moves D to index 2 after we read the column
  And we move A from index 0 to index 1
  Then our first attempt is discarded and retried against [A, B, D, C]
  And the column ends as [B, A, D, C] with dense positions

Scenario: Every attempt loses the race
  When a competing writer commits before each of our attempts can claim the column
  Then PersistenceFailure is raised and only the competitor's changes are visible

Scenario: Two threads move tasks in the same column simultaneously
  Then each call either succeeds or is rejected explicitly
  And the column remains densely ordered
"""

import threading
import pytest
from sqlmodel import Session
from models.auth import User
from models.boards import BoardColumn, Task
from helpers.auth import hash_password
from helpers.ordering import (
    OrderedCollection, OrderingError, PersistenceFailure, task_order
)


class InterleavingCollection(OrderedCollection):
    """Task ordering that lets a competing writer commit right after each revision read."""

    def __init__(self, competitors, **kwargs):
        super().__init__(Task, BoardColumn, "column_id", item_label="Task", scope_label="Column", **kwargs)
        self.competitors = list(competitors)

    def _scope_revision(self, session, scope_id):
        revision = super()._scope_revision(session, scope_id)
        if self.competitors:
            self.competitors.pop(0)()
        return revision


@pytest.fixture(name="shared_column")
def shared_column_fixture(file_engine, board_builder):
    with Session(file_engine) as setup_session:
        owner = User(name="Ada", email="ada@example.com", hashed_password=hash_password("secret123"))
        setup_session.add(owner)
        setup_session.commit()
        setup_session.refresh(owner)

        board, columns = board_builder(owner, {"To Do": ["A", "B", "C", "D"]}, db_session=setup_session)
        column, tasks = columns["To Do"]
        return column.id, {title: task.id for title, task in tasks.items()}


def read_column(engine, column_id):
    with Session(engine) as session:
        column = session.get(BoardColumn, column_id)
        members = task_order.sequence(session, column_id)
        return column.revision, [task.title for task in members], [task.position for task in members]


def move_in_new_session(engine, column_id, task_id, source_index, destination_index):
    with Session(engine) as session:
        task_order.move_within_scope(session, column_id, task_id, source_index, destination_index)


def test_losing_writer_retries_with_fresh_read(file_engine, shared_column, caplog):
    column_id, ids = shared_column
    start_revision, _, _ = read_column(file_engine, column_id)

    collection = InterleavingCollection([
        lambda: move_in_new_session(file_engine, column_id, ids["D"], 3, 2)
    ])
    with Session(file_engine) as session:
        collection.move_within_scope(session, column_id, ids["A"], 0, 1)

    revision, titles, positions = read_column(file_engine, column_id)
    assert titles == ["B", "A", "D", "C"]
    assert positions == [0, 1, 2, 3]
    assert revision == start_revision + 2
    assert "retrying" in caplog.text


def test_exhausted_retries_raise_persistence_failure(file_engine, shared_column):
    column_id, ids = shared_column
    start_revision, _, _ = read_column(file_engine, column_id)

    collection = InterleavingCollection([
        lambda: move_in_new_session(file_engine, column_id, ids["D"], 3, 2),
        lambda: move_in_new_session(file_engine, column_id, ids["D"], 2, 3)
    ], max_retries=2)

    with Session(file_engine) as session:
        with pytest.raises(PersistenceFailure):
            collection.move_within_scope(session, column_id, ids["A"], 0, 1)

    revision, titles, positions = read_column(file_engine, column_id)
    # Only the competitor's two moves landed, and they cancel out
    assert titles == ["A", "B", "C", "D"]
    assert positions == [0, 1, 2, 3]
    assert revision == start_revision + 2


def test_competing_append_does_not_duplicate_positions(file_engine, shared_column):
    column_id, _ = shared_column

    def competing_append():
        with Session(file_engine) as other:
            task_order.append(other, column_id, Task(title="E", column_id=column_id))

    collection = InterleavingCollection([competing_append])
    with Session(file_engine) as session:
        position = collection.append(session, column_id, Task(title="F", column_id=column_id))

    _, titles, positions = read_column(file_engine, column_id)
    assert position == 5
    assert titles == ["A", "B", "C", "D", "E", "F"]
    assert positions == [0, 1, 2, 3, 4, 5]


def test_simultaneous_moves_keep_column_dense(file_engine, shared_column):
    column_id, ids = shared_column
    barrier = threading.Barrier(2)
    outcomes = []

    def worker(task_id, source_index, destination_index):
        barrier.wait()
        try:
            move_in_new_session(file_engine, column_id, task_id, source_index, destination_index)
            outcomes.append(None)
        except OrderingError as e:
            outcomes.append(e)

    threads = [
        threading.Thread(target=worker, args=(ids["A"], 0, 3)),
        threading.Thread(target=worker, args=(ids["D"], 3, 1)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(outcomes) == 2
    assert any(outcome is None for outcome in outcomes)

    _, titles, positions = read_column(file_engine, column_id)
    assert sorted(titles) == ["A", "B", "C", "D"]
    assert positions == [0, 1, 2, 3]
