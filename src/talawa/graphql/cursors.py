"""
Opaque pagination cursors.

A cursor is a pydantic model serialised to JSON by alias and wrapped in
unpadded base64url. Decoding never raises: a cursor that is not valid
base64url, not JSON, or not shaped like the expected model decodes to ``None``.
"""

import base64
import binascii
from datetime import datetime
from typing import TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CursorT = TypeVar("CursorT", bound=BaseModel)


class VoteCursor(BaseModel):
    """Position of a vote in the (created_at, creator_id) keyset order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    created_at: datetime = Field(alias="createdAt")
    creator_id: UUID = Field(alias="creatorId")


def encode_cursor(cursor: BaseModel) -> str:
    payload = cursor.model_dump_json(by_alias=True).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")


def decode_cursor(cursor: str, model_cls: type[CursorT]) -> CursorT | None:
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = base64.b64decode(padded, altchars=b"-_", validate=True)
        return model_cls.model_validate_json(payload)
    except (binascii.Error, ValueError):
        # pydantic's ValidationError is a ValueError
        return None
