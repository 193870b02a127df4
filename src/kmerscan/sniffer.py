"""
sniffer.py: decide what an untyped byte stream holds and count it.

There is no magic-byte check. A stream is first read as a tar archive; if
that fails, or the archive yields no k-mers, it is rewound (when possible)
and read as FASTA. Archive members go through the same procedure, so
archives may nest.
"""

from __future__ import annotations

import lzma
import tarfile
import zlib
from typing import IO

from core.logging import logger_kmer as logger
from core.settings import get_settings
from kmerscan.counter import count_stream
from kmerscan.exceptions import NotAnArchiveError, NotSequenceFormatError

# Everything tarfile and its decompressors raise on bytes that are not what they expect
ARCHIVE_ERRORS: tuple[type[BaseException], ...] = (
    tarfile.TarError,
    OSError,
    EOFError,
    zlib.error,
    lzma.LZMAError,
)


def is_rewindable(stream: IO[bytes]) -> bool:
    """True when ``stream`` can be repositioned to its start."""
    # Member files of a streamed tar forward seekable() to an object that lacks it
    try:
        return bool(stream.seekable())
    except (AttributeError, OSError, ValueError):
        return False


def count_archive(stream: IO[bytes], k: int, depth: int = 0, rewindable: bool = True, name: str = "<stream>") -> int:
    """
    Count k-mers across the members of a tar archive held in ``stream``.

    Seekable streams are opened with transparent gzip/bzip2/xz detection and
    their members are themselves seekable. Other streams are read as a
    forward-only stream of tar blocks.

    Raises:
        NotAnArchiveError: the first header cannot be framed, or the members
            contributed no k-mers at all
    """
    mode = "r:*" if rewindable else "r|*"
    try:
        archive = tarfile.open(fileobj=stream, mode=mode)
    except ARCHIVE_ERRORS as exc:
        raise NotAnArchiveError(
            details=str(exc).splitlines()[0] if str(exc) else type(exc).__name__,
            context={"stream": name, "depth": depth},
            original_exception=exc,
        ) from exc

    total = 0
    members = 0
    with archive:
        try:
            for member in archive:
                if not member.isreg():
                    continue
                members += 1
                member_name = f"{name}:{member.name}"
                entry = archive.extractfile(member)
                if entry is None:
                    continue
                with entry:
                    total += sniff_stream(entry, k, depth=depth + 1, rewindable=rewindable, name=member_name)
        # Either way the archive ends here and what was counted is kept
        except OSError as exc:
            logger.debug(
                "Archive read failed, keeping partial total",
                extra={"stream": name, "depth": depth, "partial_total": total, "error": repr(exc)},
            )
        except ARCHIVE_ERRORS as exc:
            logger.debug(
                "Archive enumeration stopped at a broken header",
                extra={"stream": name, "depth": depth, "partial_total": total, "error": repr(exc)},
            )

    if total == 0:
        raise NotAnArchiveError(
            message="Archive yielded no k-mers",
            details=f"{members} regular member(s) parsed, none contributed",
            context={"stream": name, "depth": depth, "members": members},
        )

    logger.debug("Counted archive", extra={"stream": name, "depth": depth, "members": members, "total": total})
    return total


def sniff_stream(
    stream: IO[bytes],
    k: int,
    depth: int = 0,
    rewindable: bool | None = None,
    name: str = "<stream>",
) -> int:
    """
    Count k-mers in a stream of unknown type.

    Tries tar first, then FASTA. A stream that is neither contributes 0;
    format verdicts never escape this function.

    When the stream cannot be rewound after a failed archive attempt, FASTA
    parsing resumes from wherever the archive reader stopped.
    """
    settings = get_settings()
    if rewindable is None:
        rewindable = is_rewindable(stream)

    if depth <= settings.KMER_MAX_ARCHIVE_DEPTH:
        try:
            return count_archive(stream, k, depth=depth, rewindable=rewindable, name=name)
        except NotAnArchiveError as exc:
            logger.debug("Not an archive", extra={"stream": name, "depth": depth, "reason": exc.details})

        if rewindable:
            try:
                stream.seek(0)
            except (OSError, ValueError) as exc:
                logger.debug("Rewind failed, continuing in place", extra={"stream": name, "error": repr(exc)})
    else:
        logger.debug("Archive nesting limit reached", extra={"stream": name, "depth": depth})

    try:
        total = count_stream(stream, k, buffer_size=settings.KMER_READ_BUFFER_SIZE)
    except NotSequenceFormatError as exc:
        logger.debug("Not a FASTA stream", extra={"stream": name, "reason": exc.message})
        return 0
    except ARCHIVE_ERRORS as exc:
        logger.debug("Stream unreadable", extra={"stream": name, "error": repr(exc)})
        return 0

    logger.debug("Counted FASTA stream", extra={"stream": name, "total": total})
    return total
