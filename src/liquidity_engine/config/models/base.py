"""
Base Configuration Model.

Frozen pydantic model whose string inputs may reference environment
variables.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from ..env import expand_env, walk


class BaseConfig(BaseModel):
    """
    Base for all engine configuration models.

    - `${VAR}` / `${VAR:default}` in any string field is expanded on input
      (unset without default expands to "")
    - Instances are immutable
    - Unknown keys are ignored so one YAML file can feed several sections

    Example:
        >>> class FeedConfig(BaseConfig):
        ...     symbol: str = "BTCUSDT"
        ...
        >>> FeedConfig(symbol="${SYMBOL:ETHUSDT}").symbol
        'ETHUSDT'
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_default=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def expand_environment(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return walk(data, expand_env)
        return data
