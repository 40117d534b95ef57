"""Incremental parser for streamed completion records.

The response body is a sequence of records, each introduced by ``data: ``
at the start of a line. Transport chunks do not respect record boundaries,
so the unterminated tail of the text seen so far is buffered across reads.
"""

import json
import re
from typing import Any

EVENT_DELIMITER = "data: "
DONE_SENTINEL = "[DONE]"

# Only a delimiter at the start of a line separates records; JSON payloads
# never contain raw newlines, so "data: " inside a string is left alone.
_DELIMITER_PATTERN = re.compile(r"^" + re.escape(EVENT_DELIMITER), re.MULTILINE)


def parse_record(fragment: str) -> dict[str, Any] | None:
    """Parse one record payload, returning None if it is not a JSON object."""
    try:
        record = json.loads(fragment)
    except ValueError:
        return None
    return record if isinstance(record, dict) else None


def extract_delta(record: dict[str, Any]) -> str | None:
    """Return ``choices[0].delta.content`` if it is a non-empty string."""
    choices = record.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0]
    if not isinstance(choice, dict):
        return None
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class EventStreamDecoder:
    """Turn arbitrarily chunked text into content deltas, in order.

    Fragments that do not parse are skipped without raising: the terminal
    ``[DONE]`` sentinel sets ``terminated``, anything else non-blank is
    counted in ``malformed``.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self.malformed = 0
        self.terminated = False

    @property
    def pending(self) -> str:
        """Buffered text not yet resolved into a record."""
        return self._buffer

    def feed(self, text: str) -> list[str]:
        """Consume a chunk of decoded text and return the deltas it completes."""
        self._buffer += text
        fragments = _DELIMITER_PATTERN.split(self._buffer)
        self._buffer = fragments.pop()

        deltas = []
        for fragment in fragments:
            delta = self._consume(fragment)
            if delta is not None:
                deltas.append(delta)

        # A tail that is already a whole JSON object cannot grow into a
        # longer valid record, so it need not wait for the next delimiter.
        record = parse_record(self._buffer) if self._buffer.strip() else None
        if record is not None:
            self._buffer = ""
            delta = extract_delta(record)
            if delta is not None:
                deltas.append(delta)
        return deltas

    def flush(self) -> list[str]:
        """Resolve whatever is buffered once the transport has ended."""
        fragment, self._buffer = self._buffer, ""
        delta = self._consume(fragment)
        return [delta] if delta is not None else []

    def _consume(self, fragment: str) -> str | None:
        payload = fragment.strip()
        if not payload:
            return None
        if payload == DONE_SENTINEL:
            self.terminated = True
            return None
        record = parse_record(payload)
        if record is None:
            self.malformed += 1
            return None
        return extract_delta(record)
