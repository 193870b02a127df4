"""
counter.py: streaming FASTA record counter.

Reads a byte stream in large chunks and drives a three-state machine over it:

  SEEK_HEADER  skip bytes until a '>' that starts a line
  SKIP_HEADER  discard the header line up to the next line boundary
  COUNTING     tally residue bytes until the next header or end of stream

Line boundaries are LF and CR, both in every state. Only the length of each
record is kept; it is turned into a k-mer count as soon as the record closes.
"""

from __future__ import annotations

from enum import Enum
from typing import IO

from core.exceptions import ValidationError
from core.settings import get_settings
from kmerscan.exceptions import NotSequenceFormatError

HEADER_MARKER: bytes = b">"
LINE_FEED: bytes = b"\n"
CARRIAGE_RETURN: bytes = b"\r"
_BOUNDARY_BYTES = frozenset(LINE_FEED + CARRIAGE_RETURN)


class CounterState(str, Enum):
    SEEK_HEADER = "seek_header"
    SKIP_HEADER = "skip_header"
    COUNTING = "counting"


def kmers_for_length(length: int, k: int) -> int:
    """Number of k-mer positions in a record of ``length`` residues (never negative)."""
    return max(length - k + 1, 0)


def _find_line_boundary(buf: bytes, start: int) -> int:
    lf = buf.find(LINE_FEED, start)
    cr = buf.find(CARRIAGE_RETURN, start)
    if lf < 0:
        return cr
    if cr < 0:
        return lf
    return min(lf, cr)


class SequenceCounter:
    """
    Incremental FASTA k-mer counter.

    Feed it consecutive chunks of a stream with :meth:`feed` and call
    :meth:`finish` once the stream is exhausted. Either call raises
    :class:`NotSequenceFormatError` when the stream turns out not to be
    FASTA; the partial total is discarded in that case.
    """

    def __init__(self, k: int) -> None:
        if k < 1:
            raise ValidationError(f"k must be a positive integer, got {k}", context={"k": k})
        self.k = k
        self.total = 0
        self.records = 0
        self.state = CounterState.SEEK_HEADER
        self._record_length = 0
        self._bytes_seen = 0
        # Start of stream counts as following a line boundary
        self._after_boundary = True
        self._finished = False

    def _follows_boundary(self, buf: bytes, idx: int) -> bool:
        if idx == 0:
            return self._after_boundary
        return buf[idx - 1] in _BOUNDARY_BYTES

    def _close_record(self) -> None:
        self.total += kmers_for_length(self._record_length, self.k)
        self.records += 1
        self._record_length = 0

    def feed(self, chunk: bytes) -> None:
        """Advance the state machine over one chunk of the stream."""
        if self._finished:
            raise RuntimeError("SequenceCounter.feed() called after finish()")
        if not chunk:
            return

        pos = 0
        end = len(chunk)
        while pos < end:
            if self.state is CounterState.SEEK_HEADER:
                idx = chunk.find(HEADER_MARKER, pos)
                while idx >= 0 and not self._follows_boundary(chunk, idx):
                    idx = chunk.find(HEADER_MARKER, idx + 1)
                if idx < 0:
                    break
                self.state = CounterState.SKIP_HEADER
                pos = idx + 1

            elif self.state is CounterState.SKIP_HEADER:
                idx = _find_line_boundary(chunk, pos)
                if idx < 0:
                    break
                self.state = CounterState.COUNTING
                self._record_length = 0
                pos = idx + 1

            else:
                idx = chunk.find(HEADER_MARKER, pos)
                stop = end if idx < 0 else idx
                if stop > pos:
                    boundaries = chunk.count(LINE_FEED, pos, stop) + chunk.count(CARRIAGE_RETURN, pos, stop)
                    self._record_length += (stop - pos) - boundaries
                if idx < 0:
                    break
                if not self._follows_boundary(chunk, idx):
                    offset = self._bytes_seen + idx
                    self._finished = True
                    raise NotSequenceFormatError(
                        message="Header marker found in the middle of a sequence line",
                        details=f"unexpected '>' at byte offset {offset}",
                        context={"offset": offset, "records_closed": self.records},
                    )
                self._close_record()
                self.state = CounterState.SKIP_HEADER
                pos = idx + 1

        self._after_boundary = chunk[-1] in _BOUNDARY_BYTES
        self._bytes_seen += end

    def finish(self) -> int:
        """
        Close the stream and return the k-mer total.

        A stream that never contained a header line is not FASTA, even if
        it is empty. A stream that ends inside a header line simply ends.
        """
        if self._finished:
            raise RuntimeError("SequenceCounter.finish() called twice")
        self._finished = True

        if self.state is CounterState.SEEK_HEADER:
            raise NotSequenceFormatError(
                message="No FASTA header line found",
                details=f"scanned {self._bytes_seen} bytes without a line starting with '>'",
                context={"bytes_seen": self._bytes_seen},
            )
        if self.state is CounterState.COUNTING:
            self._close_record()
        return self.total


def count_stream(stream: IO[bytes], k: int, buffer_size: int | None = None) -> int:
    """
    Count k-mer positions across every FASTA record of ``stream``.

    Reads from the stream's current position to its end.

    Raises:
        NotSequenceFormatError: the stream is not FASTA
    """
    if buffer_size is None:
        buffer_size = get_settings().KMER_READ_BUFFER_SIZE

    counter = SequenceCounter(k)
    while chunk := stream.read(buffer_size):
        counter.feed(chunk)
    return counter.finish()
