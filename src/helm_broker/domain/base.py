"""Base class for the broker's immutable records."""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Frozen, strictly validated record shared by catalog, instance and release models."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_assignment=True)

    def evolve(self, **changes: Any) -> Self:
        """Return a copy with ``changes`` applied and validated.

        Unlike ``model_copy(update=...)``, unknown fields and bad values raise.
        """

        return self.model_validate({**self.model_dump(), **changes})
