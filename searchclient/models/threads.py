"""Thread message models."""

import math

from pydantic import BaseModel, ConfigDict, field_validator


class ThreadMessage(BaseModel):
    """Single message of a conversation thread.

    `id` is unique per channel; `ts` is a stringified numeric timestamp used
    for ordering.
    """

    model_config = ConfigDict(extra="allow")

    id: int | str
    channel_id: str | None = None
    channel_name: str | None = None
    user_id: str | None = None
    ts: str
    text: str = ""
    author: str = ""

    @field_validator("ts")
    @classmethod
    def validate_ts(cls, v: str) -> str:
        """Reject timestamps that cannot be ordered numerically."""
        try:
            value = float(v)
        except ValueError:
            raise ValueError(f"ts must be numeric, got {v!r}") from None
        if not math.isfinite(value):
            raise ValueError(f"ts must be finite, got {v!r}")
        return v

    @property
    def ts_value(self) -> float:
        """Numeric ordering key."""
        return float(self.ts)


class ThreadResponse(BaseModel):
    """Response of GET /api/thread."""

    model_config = ConfigDict(extra="allow")

    ok: bool = True
    channel_id: str
    thread_root_ts: str
    messages: list[ThreadMessage] = []
