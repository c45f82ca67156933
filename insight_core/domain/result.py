"""
Explicit outcome types shared by every calculator and collaborator wrapper.

Expected failures (too few readings, a product that cannot be found) are
returned as values rather than raised, so callers must decide how to render
them. Only configuration mistakes are raised, and only at configuration time.
"""

from typing import Generic, TypeVar

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class InsufficientData(Exception):
    """A metric could not be computed from the available samples."""

    def __init__(self, metric: str, required: int, available: int) -> None:
        self.metric = metric
        self.required = required
        self.available = available
        super().__init__(
            f"{metric} needs at least {required} sample(s), {available} available"
        )


class ExternalLookupFailure(Exception):
    """A food lookup collaborator returned nothing or failed."""

    def __init__(self, query: str, reason: str = "no match") -> None:
        self.query = query
        self.reason = reason
        super().__init__(f"lookup for {query!r} failed: {reason}")


class ConfigurationError(ValueError):
    """User thresholds or engine settings are inconsistent."""


class Result(Generic[ValueT, ErrorT]):
    """
    Either a computed value or the reason it could not be computed.

    A zero value is a valid ``ok`` result; "no data" is always an ``err``.
    Zero insulin on board or zero points describe the user, while an empty
    window describes nothing: rendering it as 0 mg/dL or 0% in range would
    read as a measurement, so callers get an error value to label instead.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.err({self._error!r})"
        return f"Result.ok({self._value!r})"
