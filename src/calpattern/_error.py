from __future__ import annotations

from typing import Literal

PatternErrorKind = Literal["argument", "range", "unsupported"]


class PatternError(Exception):
    """Raised for caller mistakes; a search without result returns None instead."""

    kind: PatternErrorKind
    argument_name: str | None

    def __init__(
        self,
        kind: PatternErrorKind,
        message: str,
        argument_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.argument_name = argument_name

    @classmethod
    def argument(cls, name: str, message: str | None = None) -> PatternError:
        return cls("argument", message or f"{name} must not be None", name)

    @classmethod
    def range(cls, name: str, message: str) -> PatternError:
        return cls("range", message, name)

    @classmethod
    def unsupported(cls, name: str, value: object) -> PatternError:
        return cls("unsupported", f"unsupported {name}: {value!r}", name)

    def display_rich(self) -> str:
        if self.argument_name:
            return f"error[{self.kind}]: {self} (argument: {self.argument_name})"
        return f"error[{self.kind}]: {self}"
