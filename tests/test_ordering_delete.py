"""
Feature: Delete an ordered item
  As a route handler removing a task or a column
  I want the gap left behind closed
  So that the remaining siblings keep dense positions

Scenario: Delete a task from the middle of a column
  Given a column with tasks [A, B, C, D]
  When B is deleted
  Then the column holds [A, C, D] at positions [0, 1, 2]

Scenario: Delete twice
  When an already deleted task is deleted again
  Then ItemNotFound is raised

Scenario: Delete a column with tasks
  When a column is deleted
  Then its tasks, attachments and comments are removed
  And the remaining columns are renumbered
"""

import pytest
from sqlmodel import select
from models.boards import BoardColumn, Task
from models.attachments import Attachment
from models.comments import Comment
from helpers.ordering import column_order, task_order, ItemNotFound


def test_delete_middle_task_compacts(session, user, board_builder, task_titles, positions):
    board, columns = board_builder(user, {"To Do": ["A", "B", "C", "D"]})
    column, tasks = columns["To Do"]
    deleted_id = tasks["B"].id

    task_order.delete(session, deleted_id)

    assert task_titles(column.id) == ["A", "C", "D"]
    assert positions(task_order, session, column.id) == [0, 1, 2]
    assert session.get(Task, deleted_id) is None


def test_delete_last_task_writes_no_siblings(session, user, board_builder, positions):
    board, columns = board_builder(user, {"To Do": ["A", "B"]})
    column, tasks = columns["To Do"]

    task_order.delete(session, tasks["B"].id)

    assert positions(task_order, session, column.id) == [0]


def test_delete_twice_raises_not_found(session, user, board_builder):
    board, columns = board_builder(user, {"To Do": ["A"]})
    _, tasks = columns["To Do"]
    task_id = tasks["A"].id

    task_order.delete(session, task_id)

    with pytest.raises(ItemNotFound) as exc_info:
        task_order.delete(session, task_id)
    assert exc_info.value.kind == "Task"


def test_delete_then_append_reuses_end_position(session, user, board_builder, task_titles, positions):
    board, columns = board_builder(user, {"To Do": ["A", "B", "C"]})
    column, tasks = columns["To Do"]

    task_order.delete(session, tasks["A"].id)
    position = task_order.append(session, column.id, Task(title="D", column_id=column.id))

    assert position == 2
    assert task_titles(column.id) == ["B", "C", "D"]
    assert positions(task_order, session, column.id) == [0, 1, 2]


def test_delete_column_cascades_and_compacts(session, user, board_builder, positions):
    board, columns = board_builder(user, {"Backlog": ["A"], "Doing": ["B", "C"], "Done": []})
    doing, doing_tasks = columns["Doing"]
    doing_id = doing.id

    attachment = Attachment(
        task_id=doing_tasks["B"].id,
        filename="spec.pdf",
        file_url="https://files.example.com/spec.pdf",
        file_type="application/pdf",
        file_size=1024
    )
    comment = Comment(task_id=doing_tasks["B"].id, user_id=user.id, content="On it")
    session.add_all([attachment, comment])
    session.commit()

    column_order.delete(session, doing_id)

    assert [column.name for column in column_order.sequence(session, board.id)] == ["Backlog", "Done"]
    assert positions(column_order, session, board.id) == [0, 1]
    assert session.get(BoardColumn, doing_id) is None
    assert session.exec(select(Task).where(Task.column_id == doing_id)).all() == []
    assert session.exec(select(Attachment)).all() == []
    assert session.exec(select(Comment)).all() == []
