"""Read access to the ``contacts`` table.

The notifier issues exactly one statement against the store: select
every contact that has not been acknowledged yet.  Rows come back
oldest first so repeated polls text staff in a stable order.  Nothing
here writes to the database; acknowledgment is someone else's job.
"""

from __future__ import annotations

import logging
from typing import List

import sqlalchemy as sa
from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ContactStoreError
from ..models import CONTACT_COLUMNS, Contact

logger = logging.getLogger(__name__)

UNACKNOWLEDGED_QUERY = sa.text(
    "SELECT " + ", ".join(CONTACT_COLUMNS) + " "
    "FROM contacts "
    "WHERE acknowledged = :acknowledged "
    "ORDER BY created_on ASC, id ASC"
).bindparams(acknowledged=False)


def fetch_unacknowledged(engine: Engine) -> List[Contact]:
    """Return all contacts still waiting for staff acknowledgment.

    Args:
        engine: Engine bound to the contacts database.

    Returns:
        Contacts ordered by creation time, then id.  Empty when
        everything has been acknowledged.

    Raises:
        ContactStoreError: The query failed or a row could not be
            turned into a :class:`Contact`.  No partial list is
            returned in either case.
    """
    try:
        with engine.connect() as conn:
            rows = conn.execute(UNACKNOWLEDGED_QUERY).mappings().all()
    except SQLAlchemyError as exc:
        logger.debug("Contacts query failed: %s", exc)
        raise ContactStoreError(f"Failed to query unacknowledged contacts: {exc}") from exc

    contacts: List[Contact] = []
    for row in rows:
        try:
            contacts.append(Contact.model_validate(dict(row)))
        except ValidationError as exc:
            raise ContactStoreError(
                f"Malformed contact row {row.get('id')!r}: {exc}"
            ) from exc
    return contacts
