"""Tagged success / failure results for the outer surfaces.

Handlers raise DomainException subclasses; surfaces that must answer with
a body instead of an exception (JSON output, HTTP-style adapters) wrap the
call in ``capture()``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Generic, TypeVar, Union

from storefront.domain.exceptions import DomainException

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self.data) if is_dataclass(self.data) else self.data
        return {"success": True, "data": data}


@dataclass(frozen=True)
class Failure:
    error: str
    code: str
    success: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error, "code": self.code}


Result = Union[Success[T], Failure]


def capture(operation: Callable[[], T]) -> Result[T]:
    """Run *operation*, turning business errors into a Failure."""
    try:
        return Success(operation())
    except DomainException as exc:
        return Failure(error=str(exc), code=exc.code)
