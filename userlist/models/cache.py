"""Cache-related data models."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from userlist.exceptions import FetchFailure


class CacheStatus(StrEnum):
    """Lifecycle of a cache entry within one revalidation cycle."""

    IDLE = "idle"
    VALIDATING = "validating"
    SETTLED = "settled"


class CacheEntry(BaseModel):
    """Model for one cached resource.

    Only the fetch cache writes these; consumers receive copies.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    data: list[Any] | None = None  # None until the first successful fetch
    status: CacheStatus = CacheStatus.IDLE
    error: FetchFailure | None = None
    updated_at: float | None = None

    @property
    def is_validating(self) -> bool:
        return self.status == CacheStatus.VALIDATING
