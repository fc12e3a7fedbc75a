"""
Schema-driven argument validation.

Arguments are validated in one pass and every failure is reported as an
:class:`ArgumentIssue` instead of stopping at the first one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)
DataT = TypeVar("DataT")


@dataclass(frozen=True)
class ArgumentIssue:
    """A problem with one argument, addressed by its path in the field arguments."""

    argument_path: tuple[str | int, ...]
    message: str | None = None

    def to_extension(self) -> dict[str, Any]:
        extension: dict[str, Any] = {"argumentPath": list(self.argument_path)}
        if self.message is not None:
            extension["message"] = self.message
        return extension


@dataclass
class ParseResult(Generic[DataT]):
    """Outcome of validating arguments: the parsed data or the collected issues."""

    data: DataT | None = None
    issues: list[ArgumentIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.issues


def issues_from_validation_error(error: ValidationError) -> list[ArgumentIssue]:
    """Translate pydantic errors into issues keyed by argument path."""
    return [
        ArgumentIssue(argument_path=tuple(detail["loc"]), message=detail["msg"])
        for detail in error.errors()
    ]


def parse_arguments(model_cls: type[ModelT], arguments: Mapping[str, Any]) -> ParseResult[ModelT]:
    """Validate ``arguments`` against ``model_cls`` without raising."""
    try:
        return ParseResult(data=model_cls.model_validate(dict(arguments)))
    except ValidationError as e:
        return ParseResult(issues=issues_from_validation_error(e))
