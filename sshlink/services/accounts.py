"""Credential helpers for new SSH accounts.

Creating the OS account itself (useradd/chage) is left to the caller; this
module only decides the username, password and expiry date that go into it.
"""
import secrets
from datetime import date, datetime, timedelta

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError

from sshlink.models.username_sequence import username_sequences


PASSWORD_PREFIX = "SSHMGMT"
DATE_FORMAT = "%Y-%m-%d"


class InvalidExpiryDate(ValueError):
    pass


def generate_password() -> str:
    return f"{PASSWORD_PREFIX}{secrets.randbelow(100000):05d}"


def expiry_after(days: int, today: date = None) -> str:
    """Expiry date for an account valid for `days` full days.

    One extra day is added so the account survives the whole last day.
    """
    if today is None:
        today = date.today()
    return (today + timedelta(days=days + 1)).strftime(DATE_FORMAT)


def normalize_expiry_date(value: str) -> str:
    try:
        parsed = datetime.strptime(value.strip(), DATE_FORMAT)
    except (AttributeError, ValueError) as e:
        raise InvalidExpiryDate(f"Invalid expiry date: {value!r}") from e
    return parsed.strftime(DATE_FORMAT)


def allocate_username(db, prefix: str) -> str:
    """Reserve the next username for prefix, e.g. user001, user002, ...

    The counter is bumped with a single UPDATE .. RETURNING, so two callers
    never get the same number.
    """
    bump = (
        update(username_sequences)
        .where(username_sequences.c.prefix == prefix)
        .values(last_value=username_sequences.c.last_value + 1)
        .returning(username_sequences.c.last_value)
    )
    try:
        value = db.execute(bump).scalar_one_or_none()
        if value is None:
            try:
                db.execute(insert(username_sequences).values(prefix=prefix, last_value=1))
                value = 1
            except IntegrityError:
                # another caller created the row first
                db.rollback()
                value = db.execute(bump).scalar_one()
        db.commit()
    except Exception:
        db.rollback()
        raise
    return f"{prefix}{value:03d}"
