"""
Base Schema Models for l402-agent

Every model exchanged between the gate, the client orchestrator and wallet
adapters inherits from CanonicalModel so that serialization is consistent
across the package (deterministic JSON, camelCase aliases on the wire).

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class CanonicalModel(BaseModel):
    """
    Pydantic base model with deterministic JSON serialization.

    Fields may declare wire aliases (``amountSats``); models accept both the
    Python name and the alias on input and emit aliases on output.

    Example:
        class MyModel(CanonicalModel):
            amount_sats: int = Field(..., alias="amountSats")

        MyModel(amount_sats=5).to_canonical_json()  # '{"amountSats":5}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to a compact JSON string with sorted keys.

        Returns:
            str: JSON string using wire aliases, no extra whitespace.
        """
        return json.dumps(
            self.to_dict(),
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to its wire dictionary representation.

        Returns:
            Dict[str, Any]: JSON-compatible dictionary keyed by aliases.
        """
        return self.model_dump(mode="json", by_alias=True)


class FrozenModel(CanonicalModel):
    """CanonicalModel whose instances are immutable once created."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)
