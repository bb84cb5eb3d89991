"""Exceptions raised by cronbits.

Parsing failures and caller precondition violations are the only errors the
library raises. Searching for an occurrence never fails: exhausting the
search bound is reported as ``None``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cronbits.fields import CronField


class CronError(Exception):
    """Base class for all cronbits errors."""

    pass


class CronFormatError(CronError, ValueError):
    """Raised when a cron expression cannot be parsed.

    Attributes:
        field: Field being parsed when the failure occurred, if known.
        expression: The full expression text.
        position: Character offset of the failure, or -1 if unknown.
        character: Offending character, or None at end of text.
    """

    def __init__(
        self,
        message: str,
        *,
        field: "CronField | None" = None,
        expression: str = "",
        position: int = -1,
        character: str | None = None,
    ) -> None:
        self.field = field
        self.expression = expression
        self.position = position
        self.character = character
        if field is not None:
            message = (
                f"The given cron expression has an invalid '{field.display_name}' "
                f"field: {message}"
            )
        super().__init__(message)


class PreconditionError(CronError, ValueError):
    """Raised when a caller passes a datetime with the wrong timezone tagging."""

    def __init__(self, message: str, parameter: str = "") -> None:
        self.parameter = parameter
        super().__init__(message)
