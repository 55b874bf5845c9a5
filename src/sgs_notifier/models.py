"""Pydantic model for rows of the ``contacts`` table.

Contacts are written by the website's contact form handler and only
ever read here.  Validation happens when a row is loaded so that a
malformed row surfaces as an error instead of a half-formatted text.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Contact(BaseModel):
    """A contact form submission.

    Attributes:
        id: Opaque identifier, quoted back to staff for acknowledgment.
        name: Submitter's name.
        email: Submitter's email address, as typed.
        phone: Submitter's phone number, as typed.
        message: Free text from the form.
        captcha_score: Anti-spam score recorded by the form handler, or
            None when the handler stored none.
        acknowledged: False while the contact still needs a text.
        created_on: When the submission was stored.
        updated_on: When the row last changed.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    phone: str
    message: str
    captcha_score: Optional[float] = None
    acknowledged: bool
    created_on: datetime
    updated_on: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        # Integer and UUID keys are quoted back to staff as plain text.
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def __str__(self) -> str:
        return f"Contact name: {self.name}, email: {self.email}, phone: {self.phone}"


CONTACT_COLUMNS = list(Contact.model_fields)
