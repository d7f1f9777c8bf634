"""
Sequential employee id allocation.

Ids are decimal strings handed out from a configured base (20000 by default).
The last value handed out lives in an ``id_counters`` row that is bumped with a
single UPDATE, so two concurrent user creations never see the same number.
"""
from typing import Optional
import logging

from sqlalchemy.orm import Session

from ..config import settings
from ..models.counter import IdCounter
from ..models.user import User

logger = logging.getLogger(__name__)

EMPLOYEE_ID_COUNTER = "employee_id"


def parse_employee_id(value: Optional[str]) -> Optional[int]:
    """Return the numeric value of an employee id, or None if it is not all digits."""
    if not value:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


def highest_employee_id(db: Session, base: int) -> Optional[int]:
    """
    Highest numeric employee id >= base across all users.

    Soft-deleted users are included; their ids are never reused.
    """
    highest = None
    rows = db.query(User.employee_id).filter(User.employee_id.isnot(None)).all()
    for (employee_id,) in rows:
        number = parse_employee_id(employee_id)
        if number is None or number < base:
            continue
        if highest is None or number > highest:
            highest = number
    return highest


def _ensure_counter(db: Session, base: int) -> None:
    exists = db.query(IdCounter.name).filter(IdCounter.name == EMPLOYEE_ID_COUNTER).first()
    if exists:
        return

    highest = highest_employee_id(db, base)
    start = highest if highest is not None else base - 1
    db.add(IdCounter(name=EMPLOYEE_ID_COUNTER, value=start))
    db.flush()
    logger.info(f"Seeded employee id counter at {start}")


def _raise_counter_to(db: Session, value: int) -> None:
    db.query(IdCounter).filter(
        IdCounter.name == EMPLOYEE_ID_COUNTER,
        IdCounter.value < value,
    ).update({IdCounter.value: value}, synchronize_session=False)


def next_employee_id(db: Session, base: Optional[int] = None) -> str:
    """
    Allocate the next employee id inside the caller's transaction.

    The counter row stays locked until the caller commits or rolls back.
    """
    if base is None:
        base = settings.EMPLOYEE_ID_START

    _ensure_counter(db, base)
    # A lowered base in config must not hand out ids below it
    _raise_counter_to(db, base - 1)

    db.query(IdCounter).filter(IdCounter.name == EMPLOYEE_ID_COUNTER).update(
        {IdCounter.value: IdCounter.value + 1}, synchronize_session=False
    )
    value = db.query(IdCounter.value).filter(IdCounter.name == EMPLOYEE_ID_COUNTER).scalar()
    return str(value)


def record_employee_id(db: Session, employee_id: Optional[str], base: Optional[int] = None) -> None:
    """Advance the counter past an employee id that was set by hand."""
    if base is None:
        base = settings.EMPLOYEE_ID_START

    number = parse_employee_id(employee_id)
    if number is None or number < base:
        return

    _ensure_counter(db, base)
    _raise_counter_to(db, number)
