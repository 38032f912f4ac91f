"""Runtime settings for the discount calculator."""
import logging
import os
from decimal import Context
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from CartDiscounts.money import DEFAULT_PRECISION, MIN_PRECISION, money_context

ENV_PREFIX = "CART_DISCOUNTS_"


class CalculatorSettings(BaseModel):
    """Settings shared by the service and the applier.

    Attributes:
        decimal_precision: Significant digits used for money arithmetic
        log_level: Level used by the demo entry point when it configures logging
    """
    model_config = ConfigDict(frozen=True)

    decimal_precision: int = Field(default=DEFAULT_PRECISION, ge=MIN_PRECISION)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {v}")
        return level

    @classmethod
    def load_from_env(
            cls,
            prefix: str = ENV_PREFIX,
            environ: Optional[Mapping[str, str]] = None,
            **defaults: Any) -> "CalculatorSettings":
        """Build settings from prefixed environment variables.

        ``CART_DISCOUNTS_DECIMAL_PRECISION=12`` sets ``decimal_precision``.
        Unknown variables are ignored; explicit ``defaults`` are overridden
        by the environment.
        """
        values = dict(defaults)
        source = os.environ if environ is None else environ
        for key, value in source.items():
            if not key.startswith(prefix):
                continue
            name = key[len(prefix):].lower()
            if name in cls.model_fields:
                values[name] = value
        return cls(**values)

    def decimal_context(self) -> Context:
        return money_context(self.decimal_precision)
