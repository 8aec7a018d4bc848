"""Test doubles and builders shared across suites."""

from searchclient.models.threads import ThreadMessage, ThreadResponse

BASE_URL = "http://testserver"


class SleepRecorder:
    """Injectable sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeThreadFetcher:
    """Thread backend stub that records calls."""

    def __init__(
        self,
        messages: list[ThreadMessage] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.messages = messages or []
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def fetch_thread(self, channel_id: str, root_ts: str) -> ThreadResponse:
        self.calls.append((channel_id, root_ts))
        if self.error is not None:
            raise self.error
        return ThreadResponse(
            channel_id=channel_id, thread_root_ts=root_ts, messages=self.messages
        )


def make_message(id: int | str, ts: str, text: str = "") -> ThreadMessage:
    """Build a thread message with defaults for unused fields."""
    return ThreadMessage(id=id, ts=ts, text=text or f"message {id}", author="alice")
