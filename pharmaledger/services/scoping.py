from typing import Type, TypeVar

from sqlalchemy.orm import Session

from .errors import NotFound, Unauthorized

T = TypeVar("T")


def get_owned(
    db: Session,
    model: Type[T],
    record_id: int,
    tenant_id: int,
    label: str,
    lock: bool = False,
) -> T:
    """
    Fetch a record by id and verify it belongs to the caller's tenant.
    Missing -> NotFound; another tenant's record -> Unauthorized.
    """
    query = db.query(model).filter(model.id == record_id)
    if lock:
        query = query.with_for_update()
    record = query.first()
    if record is None:
        raise NotFound(f"{label} not found")
    if record.tenant_id != tenant_id:
        raise Unauthorized(f"Not authorized to access this {label.lower()}")
    return record
