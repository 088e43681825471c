"""Foundation types shared by the v1 and v2 wire models."""

from typing import TypeAlias

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Current protocol version
X402_VERSION: int = 2

Network: TypeAlias = str
"""Network identifier, CAIP-2 in v2 (e.g., "eip155:8453") or a legacy name in v1."""


class BaseX402Model(BaseModel):
    """Base class for all x402 models with camelCase JSON serialization.

    All wire models inherit from this class and serialize with
    ``to_wire()`` so that absent optional keys are omitted, not sent as null.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict:
        """Dump to the camelCase JSON-compatible dict sent over the wire."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
