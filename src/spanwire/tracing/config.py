"""Validated tracer construction options.

All constructor checks live in one Pydantic model; the Tracer never inspects
raw keyword arguments itself. Pydantic errors are translated into
ConfigurationError at the boundary.
"""

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from spanwire.config.validators import validate_callable, validate_required_string
from spanwire.tracing.types import ConfigurationError, SpanReport

RecordCallback = Callable[[SpanReport], Any]


class TracerConfig(BaseModel):
    """Options accepted by the Tracer.

    Attributes:
        access_token: Public access token identifying the account.
        component_name: Name of the service or component emitting spans.
        record_callback: Optional sink invoked once per finished span.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    access_token: str = Field(
        default=None,  # type: ignore[assignment]
        validate_default=True,
        description="Access token for the tracing account",
    )
    component_name: str = Field(
        default=None,  # type: ignore[assignment]
        validate_default=True,
        description="Component or service name attached to every report",
    )
    record_callback: RecordCallback | None = Field(
        default=None, description="Called synchronously with each finished span report"
    )

    @field_validator("access_token", mode="before")
    @classmethod
    def validate_access_token(cls, v: Any) -> str:
        """Require a string access token."""
        return validate_required_string(
            v,
            missing_message="access_token is required for the tracer",
            type_message="access_token must be a string",
        )

    @field_validator("component_name", mode="before")
    @classmethod
    def validate_component_name(cls, v: Any) -> str:
        """Require a string component name."""
        return validate_required_string(
            v,
            missing_message="component_name is required to identify where traces come from",
            type_message="component_name must be a string",
        )

    @field_validator("record_callback", mode="before")
    @classmethod
    def validate_record_callback(cls, v: Any) -> Any:
        """Allow None or any callable."""
        return validate_callable(v, "record_callback must be callable")

    @classmethod
    def build(cls, **options: Any) -> "TracerConfig":
        """Validate raw options.

        Args:
            **options: access_token, component_name and record_callback.

        Returns:
            Validated TracerConfig.

        Raises:
            ConfigurationError: With the message of the first failing check.
        """
        try:
            return cls(**options)
        except PydanticValidationError as e:
            raise ConfigurationError(_first_error_message(e)) from None


def _first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    original = error.get("ctx", {}).get("error")
    if isinstance(original, ValueError):
        return str(original)
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}"
