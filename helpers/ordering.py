"""
Ordered collection manager.

Keeps a dense, zero-based ``position`` for every item inside a parent scope
(board -> columns, column -> tasks) and exposes the only operations allowed
to change it: append, move within a scope, move across scopes and delete.

Every operation runs its read-recompute-write cycle inside one transaction.
Concurrent writers are serialized with a compare-and-swap on the scope's
``revision`` column: the writer that finds the revision changed since its
read rolls back and retries against a fresh read. After
``REORDER_MAX_RETRIES`` lost races, or on any database error, the
transaction is rolled back and ``PersistenceFailure`` is raised, leaving
the previous positions untouched.
"""

from typing import Callable, Dict, List, Optional, Tuple, Type, TypeVar
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select
from models.boards import Board, BoardColumn, Task
from settings import logger
import settings

T = TypeVar("T")


class OrderingError(Exception):
    """Base class for failures of an ordering operation."""


class ItemNotFound(OrderingError):
    """The item or one of the scopes involved does not exist."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class IndexOutOfRange(OrderingError):
    """An index falls outside the scope's current sequence."""


class ScopeConflict(OrderingError):
    """The caller's view of the item's scope or index is stale."""


class PersistenceFailure(OrderingError):
    """The store could not complete the recompute-and-write atomically."""


class _StaleRevision(Exception):
    """Another writer committed to the scope between our read and write."""


class OrderedCollection:
    """Position bookkeeping for one kind of item inside one kind of scope."""

    def __init__(
        self,
        item_model: Type[SQLModel],
        scope_model: Type[SQLModel],
        scope_field: str,
        item_label: str,
        scope_label: str,
        max_retries: Optional[int] = None
    ):
        self.item_model = item_model
        self.scope_model = scope_model
        self.scope_field = scope_field
        self.item_label = item_label
        self.scope_label = scope_label
        self.max_retries = max_retries

    @property
    def _scope_column(self):
        return getattr(self.item_model, self.scope_field)

    def sequence(self, session: Session, scope_id: str) -> List[SQLModel]:
        """Return the scope's items in position order."""
        statement = (
            select(self.item_model)
            .where(self._scope_column == scope_id)
            .order_by(self.item_model.position, self.item_model.id)
            .execution_options(populate_existing=True)
        )
        return list(session.exec(statement).all())

    def append(self, session: Session, scope_id: str, item: SQLModel) -> int:
        """Place a new item at the end of the scope and persist it."""

        def action() -> int:
            revision = self._scope_revision(session, scope_id)
            max_statement = select(func.max(self.item_model.position)).where(self._scope_column == scope_id)
            current_max = session.exec(max_statement).one()
            position = 0 if current_max is None else current_max + 1

            self._claim(session, scope_id, revision)
            setattr(item, self.scope_field, scope_id)
            item.position = position
            session.add(item)
            return position

        position = self._run(session, action, "append", scope_id=scope_id)
        logger.info("Item appended", extra={
            "item_type": self.item_label,
            "scope_id": scope_id,
            "position": position
        })
        return position

    def move_within_scope(
        self,
        session: Session,
        scope_id: str,
        item_id: str,
        source_index: int,
        destination_index: int
    ) -> None:
        """Move an item to ``destination_index`` among its current siblings.

        ``destination_index`` indexes the sequence with the moved item already
        taken out, so it must fall in ``[0, N-1]``.
        """
        self._move_within(session, scope_id, item_id, source_index, destination_index, clamp=False)

    def move_across_scopes(
        self,
        session: Session,
        item_id: str,
        source_scope_id: str,
        destination_scope_id: str,
        source_index: int,
        destination_index: int
    ) -> None:
        """Re-parent an item into another scope at ``destination_index``.

        A destination index past the end of the destination scope appends.
        Moves whose source and destination are the same scope are handled as
        a move within that scope.
        """
        if source_scope_id == destination_scope_id:
            self._move_within(
                session, source_scope_id, item_id, source_index, destination_index,
                clamp=True, check_recorded_scope=True
            )
            return

        self._check_indices(source_index, destination_index)

        def action() -> int:
            self._check_recorded_scope(session, item_id, source_scope_id)
            source_revision, source_sequence = self._load(session, source_scope_id)
            destination_revision, destination_sequence = self._load(session, destination_scope_id)

            moved = self._locate(source_sequence, item_id, source_index, source_scope_id)
            source_sequence.pop(source_index)
            insert_at = min(destination_index, len(destination_sequence))
            destination_sequence.insert(insert_at, moved)

            # Claim in a fixed order so two opposite moves cannot deadlock
            claims = sorted([
                (source_scope_id, source_revision),
                (destination_scope_id, destination_revision)
            ])
            for scope_id, revision in claims:
                self._claim(session, scope_id, revision)

            setattr(moved, self.scope_field, destination_scope_id)
            session.add(moved)
            return self._renumber(session, source_sequence) + self._renumber(session, destination_sequence)

        writes = self._run(
            session, action, "move_across_scopes",
            item_id=item_id, scope_id=source_scope_id, destination_scope_id=destination_scope_id
        )
        logger.info("Item moved across scopes", extra={
            "item_type": self.item_label,
            "scope_type": self.scope_label,
            "item_id": item_id,
            "source_scope_id": source_scope_id,
            "destination_scope_id": destination_scope_id,
            "writes": writes
        })

    def delete(self, session: Session, item_id: str) -> None:
        """Delete an item and close the gap it leaves among its siblings."""

        def action() -> Tuple[str, int]:
            item = session.get(self.item_model, item_id, populate_existing=True)
            if item is None:
                raise ItemNotFound(self.item_label, item_id)
            scope_id = getattr(item, self.scope_field)

            revision, sequence = self._load(session, scope_id)
            self._claim(session, scope_id, revision)
            session.delete(item)
            remaining = [sibling for sibling in sequence if sibling.id != item_id]
            return scope_id, self._renumber(session, remaining)

        scope_id, writes = self._run(session, action, "delete", item_id=item_id)
        logger.info("Item deleted", extra={
            "item_type": self.item_label,
            "item_id": item_id,
            "scope_id": scope_id,
            "writes": writes
        })

    def find_gaps(self, session: Session) -> Dict[str, List[int]]:
        """Return the positions of every scope that is not densely numbered."""
        statement = select(self._scope_column, self.item_model.position).order_by(self._scope_column)
        positions: Dict[str, List[int]] = {}
        for scope_id, position in session.exec(statement).all():
            positions.setdefault(scope_id, []).append(position)

        return {
            scope_id: sorted(values)
            for scope_id, values in positions.items()
            if sorted(values) != list(range(len(values)))
        }

    def _move_within(
        self,
        session: Session,
        scope_id: str,
        item_id: str,
        source_index: int,
        destination_index: int,
        clamp: bool,
        check_recorded_scope: bool = False
    ) -> None:
        self._check_indices(source_index, destination_index)

        def action() -> int:
            if check_recorded_scope:
                self._check_recorded_scope(session, item_id, scope_id)
            revision, sequence = self._load(session, scope_id)
            self._locate(sequence, item_id, source_index, scope_id)

            target = destination_index
            if target >= len(sequence):
                if not clamp:
                    raise IndexOutOfRange(
                        f"Destination index {destination_index} is outside a {self.scope_label.lower()} "
                        f"of {len(sequence)} items"
                    )
                target = len(sequence) - 1

            if target == source_index:
                return 0

            moved = sequence.pop(source_index)
            sequence.insert(target, moved)
            self._claim(session, scope_id, revision)
            return self._renumber(session, sequence)

        writes = self._run(session, action, "move_within_scope", item_id=item_id, scope_id=scope_id)
        logger.info("Item moved", extra={
            "item_type": self.item_label,
            "item_id": item_id,
            "scope_id": scope_id,
            "source_index": source_index,
            "destination_index": destination_index,
            "writes": writes
        })

    def _run(self, session: Session, action: Callable[[], T], operation: str, **context) -> T:
        """Run ``action`` in a transaction, retrying while it loses revision races."""
        max_retries = self.max_retries or settings.REORDER_MAX_RETRIES

        for attempt in range(1, max_retries + 1):
            try:
                result = action()
                session.commit()
                return result
            except _StaleRevision:
                session.rollback()
                logger.warning("Scope changed during reorder, retrying", extra={
                    "operation": operation,
                    "attempt": attempt,
                    "max_retries": max_retries,
                    **context
                })
            except OrderingError:
                session.rollback()
                raise
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Reorder could not be persisted", extra={
                    "operation": operation,
                    "error": str(e),
                    **context
                })
                raise PersistenceFailure(f"{operation} failed and was rolled back") from e

        logger.error("Reorder gave up after repeated conflicts", extra={
            "operation": operation,
            "attempts": max_retries,
            **context
        })
        raise PersistenceFailure(f"{operation} lost {max_retries} consecutive races for the same {self.scope_label.lower()}")

    def _scope_revision(self, session: Session, scope_id: str) -> int:
        scope = session.get(self.scope_model, scope_id, populate_existing=True)
        if scope is None:
            raise ItemNotFound(self.scope_label, scope_id)
        return scope.revision

    def _load(self, session: Session, scope_id: str) -> Tuple[int, List[SQLModel]]:
        revision = self._scope_revision(session, scope_id)
        return revision, self.sequence(session, scope_id)

    def _claim(self, session: Session, scope_id: str, revision: int) -> None:
        """Bump the scope revision, failing if someone else bumped it first."""
        statement = (
            update(self.scope_model)
            .where(self.scope_model.id == scope_id, self.scope_model.revision == revision)
            .values(revision=revision + 1)
        )
        result = session.exec(statement)
        if result.rowcount != 1:
            raise _StaleRevision(scope_id)

    def _locate(self, sequence: List[SQLModel], item_id: str, source_index: int, scope_id: str) -> SQLModel:
        if all(member.id != item_id for member in sequence):
            raise ItemNotFound(self.item_label, item_id)
        if source_index >= len(sequence):
            raise IndexOutOfRange(
                f"Source index {source_index} is outside a {self.scope_label.lower()} of {len(sequence)} items"
            )
        if sequence[source_index].id != item_id:
            raise ScopeConflict(
                f"{self.item_label} {item_id} is no longer at index {source_index} of "
                f"{self.scope_label.lower()} {scope_id}"
            )
        return sequence[source_index]

    def _check_recorded_scope(self, session: Session, item_id: str, scope_id: str) -> None:
        item = session.get(self.item_model, item_id, populate_existing=True)
        if item is None:
            raise ItemNotFound(self.item_label, item_id)
        if getattr(item, self.scope_field) != scope_id:
            raise ScopeConflict(
                f"{self.item_label} {item_id} is not in {self.scope_label.lower()} {scope_id}"
            )

    def _check_indices(self, source_index: int, destination_index: int) -> None:
        if source_index < 0 or destination_index < 0:
            raise IndexOutOfRange(f"Indices must not be negative (got {source_index}, {destination_index})")

    def _renumber(self, session: Session, sequence: List[SQLModel]) -> int:
        """Give every member its array index as position; return rows changed."""
        writes = 0
        for index, member in enumerate(sequence):
            if member.position != index:
                member.position = index
                session.add(member)
                writes += 1
        session.flush()
        return writes


column_order = OrderedCollection(BoardColumn, Board, "board_id", item_label="Column", scope_label="Board")
task_order = OrderedCollection(Task, BoardColumn, "column_id", item_label="Task", scope_label="Column")
