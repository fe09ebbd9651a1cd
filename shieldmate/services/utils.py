"""Shared service layer utilities."""

from typing import Any, TypeVar, Type
from enum import Enum
from sqlmodel import Session
from sqlalchemy import update

from shieldmate.exceptions.crud import NotFoundError

T = TypeVar("T")


def get_or_404(
    session: Session,
    model_class: Type[T],
    entity_id: int,
    entity_name: str | None = None,
) -> T:
    """
    Retrieve an entity by ID or raise NotFoundError.

    Parameters:
        session: Database session.
        model_class: SQLModel class to query.
        entity_id: Primary key value.
        entity_name: Optional custom name for error message (defaults to model class name).

    Raises:
        NotFoundError: If entity doesn't exist.
    """
    entity = session.get(model_class, entity_id)
    if not entity:
        name = entity_name or model_class.__name__
        raise NotFoundError(name, entity_id)
    return entity


def conditional_update(
    session: Session,
    model_class: type,
    pk_column: Any,
    entity_id: int,
    expected_status: Enum,
    values: dict[str, Any],
) -> int:
    """
    Apply `UPDATE ... SET values WHERE pk = entity_id AND status = expected_status`.

    The status predicate is the only concurrency guard: of two requests racing
    on the same record, exactly one sees a matched row. Nothing is committed
    here.

    Returns:
        int: Number of rows matched (0 or 1).
    """
    result = session.execute(
        update(model_class)
        .where(pk_column == entity_id, model_class.status == expected_status)  # type: ignore
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount  # type: ignore
