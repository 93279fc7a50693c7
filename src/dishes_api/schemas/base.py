"""Base classes for HTTP request and response bodies.

Bodies are camelCase on the wire and snake_case in Python. Requests accept
either spelling and drop unknown keys; responses serialize only the fields
they declare, so a repository row can never leak a column into a response
by accident.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Shared alias configuration; use APIRequest or APIResponse instead."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Incoming JSON body. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class APIResponse(_BaseSchema):
    """Outgoing JSON body. Undeclared keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_record(cls, record: BaseModel) -> Self:
        """Build the public view of a repository model.

        Only the fields this response declares are read from ``record``;
        anything else on the row (versions, hashes, foreign bookkeeping) is
        left behind.
        """
        return cls.model_validate(record.model_dump(include=set(cls.model_fields)))
