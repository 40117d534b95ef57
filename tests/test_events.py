"""Unit tests for the incremental stream decoder."""
import json

from hypothesis import given, settings
from hypothesis import strategies as st

from streamchat.engine.events import EventStreamDecoder, extract_delta, parse_record

from conftest import delta_record, sse_body


def _decode(chunks: list[str]) -> tuple[list[str], EventStreamDecoder]:
    decoder = EventStreamDecoder()
    deltas: list[str] = []
    for chunk in chunks:
        deltas.extend(decoder.feed(chunk))
    deltas.extend(decoder.flush())
    return deltas, decoder


def _cut(text: str, points: list[int]) -> list[str]:
    bounds = sorted({p for p in points if 0 < p < len(text)})
    pieces, start = [], 0
    for bound in bounds:
        pieces.append(text[start:bound])
        start = bound
    pieces.append(text[start:])
    return pieces


class TestExtractDelta:
    """Tests for the delta path choices[0].delta.content."""

    def test_content(self):
        assert extract_delta(delta_record("Hi")) == "Hi"

    def test_empty_content_ignored(self):
        assert extract_delta(delta_record("")) is None

    def test_role_only_delta_ignored(self):
        """The first record usually carries only the role."""
        record = {"choices": [{"index": 0, "delta": {"role": "assistant"}}]}
        assert extract_delta(record) is None

    def test_missing_choices_ignored(self):
        assert extract_delta({"id": "x"}) is None
        assert extract_delta({"choices": []}) is None

    def test_non_string_content_ignored(self):
        assert extract_delta({"choices": [{"delta": {"content": 3}}]}) is None

    def test_parse_record_rejects_non_objects(self):
        assert parse_record("[1, 2]") is None
        assert parse_record("{truncated") is None
        assert parse_record('{"a": 1}') == {"a": 1}


class TestEventStreamDecoder:
    """Tests for EventStreamDecoder."""

    def test_whole_body(self):
        """One chunk holding every record."""
        deltas, decoder = _decode([sse_body(["Hi", " there", "!"])])
        assert deltas == ["Hi", " there", "!"]
        assert decoder.terminated
        assert decoder.malformed == 0

    def test_delimiter_straddles_reads(self):
        """A delimiter split across two reads is still recognised."""
        body = sse_body(["one", "two"])
        cut = body.index("data: ", 1) + 3
        deltas, _ = _decode([body[:cut], body[cut:]])
        assert deltas == ["one", "two"]

    def test_payload_straddles_reads(self):
        """A record whose JSON spans reads is buffered, not dropped."""
        body = sse_body(["alpha"])
        middle = body.index("alpha")
        deltas, _ = _decode([body[:middle], body[middle:]])
        assert deltas == ["alpha"]

    def test_complete_tail_is_emitted_without_waiting(self):
        """A buffered tail that is already a whole record is consumed at once."""
        decoder = EventStreamDecoder()
        record = json.dumps(delta_record("now"))
        assert decoder.feed(f"data: {record}") == ["now"]
        assert decoder.pending == ""

    def test_partial_tail_waits(self):
        decoder = EventStreamDecoder()
        assert decoder.feed('data: {"choices": [{"delta": {"con') == []
        assert decoder.pending.startswith('{"choices"')

    def test_delimiter_text_inside_content(self):
        """'data: ' inside a JSON string does not split the record."""
        deltas, _ = _decode([sse_body(["see data: here", "ok"])])
        assert deltas == ["see data: here", "ok"]

    def test_malformed_records_are_skipped(self):
        """Unparseable records are counted; the stream continues."""
        body = (
            sse_body(["a"], done=False)
            + "data: {not json}\n\n"
            + sse_body(["b"])
        )
        deltas, decoder = _decode([body])
        assert deltas == ["a", "b"]
        assert decoder.malformed == 1
        assert decoder.terminated

    def test_done_sentinel_is_not_malformed(self):
        deltas, decoder = _decode(["data: [DONE]\n\n"])
        assert deltas == []
        assert decoder.terminated
        assert decoder.malformed == 0

    def test_truncated_final_record_counts_as_malformed(self):
        """A record cut off by end-of-stream is dropped at flush."""
        deltas, decoder = _decode([sse_body(["kept"], done=False) + 'data: {"choices": [{"del'])
        assert deltas == ["kept"]
        assert decoder.malformed == 1
        assert not decoder.terminated

    def test_empty_stream(self):
        deltas, decoder = _decode([])
        assert deltas == []
        assert not decoder.terminated

    def test_single_character_delivery(self):
        """Every record survives one-character reads."""
        body = sse_body(["Hel", "lo", " wörld"])
        deltas, decoder = _decode(list(body))
        assert deltas == ["Hel", "lo", " wörld"]
        assert decoder.terminated

    @given(
        contents=st.lists(st.text(min_size=1, max_size=20), min_size=0, max_size=8),
        points=st.lists(st.integers(min_value=0, max_value=2000), max_size=30),
    )
    @settings(max_examples=200)
    def test_arbitrary_chunking_preserves_deltas(self, contents, points):
        """Property: deltas come out in order, once each, for any split."""
        body = sse_body(contents)
        deltas, decoder = _decode(_cut(body, points))
        assert deltas == contents
        assert decoder.terminated
        assert decoder.malformed == 0

    @given(
        contents=st.lists(st.text(min_size=1, max_size=10), min_size=1, max_size=5),
        garbage=st.text(
            alphabet=st.characters(exclude_characters="\n\r{}[]\"", exclude_categories=("Cs",)),
            min_size=1,
            max_size=15,
        ),
    )
    @settings(max_examples=100)
    def test_garbage_record_never_breaks_stream(self, contents, garbage):
        """Property: a malformed record between good ones loses nothing else."""
        body = (
            sse_body(contents[:1], done=False)
            + f"data: x{garbage}\n\n"
            + sse_body(contents[1:])
        )
        deltas, decoder = _decode([body])
        assert deltas == contents
        assert decoder.malformed == 1
