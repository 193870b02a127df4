"""
walker.py: path classification and directory traversal.

Directories are walked with an explicit stack instead of recursion, so
nesting depth is bounded only by memory. Anything that cannot be opened
(missing, permission denied, sockets, FIFOs, devices) contributes 0.
"""

from __future__ import annotations

import os
import stat
from typing import Union

from core.logging import logger_kmer as logger
from core.settings import get_settings
from kmerscan.sniffer import sniff_stream

StrPath = Union[str, "os.PathLike[str]"]


def _dir_key(st: os.stat_result) -> tuple[int, int]:
    return (st.st_dev, st.st_ino)


def count_file(path: StrPath, k: int) -> int:
    """Open ``path`` as a regular file and sniff its contents. Returns 0 if it cannot be read."""
    path = os.fspath(path)
    try:
        st = os.stat(path)
    except OSError as exc:
        logger.debug("Skipping unreachable path", extra={"path": path, "error": repr(exc)})
        return 0

    # Opening a FIFO would block; other special files have nothing to count
    if not stat.S_ISREG(st.st_mode):
        logger.debug("Skipping special file", extra={"path": path, "mode": oct(st.st_mode)})
        return 0

    try:
        handle = open(path, "rb")
    except OSError as exc:
        logger.debug("Skipping unreadable file", extra={"path": path, "error": repr(exc)})
        return 0

    with handle:
        return sniff_stream(handle, k, name=path)


def walk_directory(path: StrPath, k: int) -> int:
    """
    Sum the k-mer counts of every file below directory ``path``.

    Children are visited in whatever order the OS lists them. A listing
    that fails part-way keeps what was counted before the failure. A
    directory that is reached again through a symlink to one of its own
    ancestors is not descended into a second time.
    """
    settings = get_settings()
    follow_symlinks = settings.KMER_FOLLOW_SYMLINKS
    root = os.fspath(path)

    try:
        root_key = _dir_key(os.stat(root))
    except OSError as exc:
        logger.debug("Skipping unreachable directory", extra={"path": root, "error": repr(exc)})
        return 0

    total = 0
    # (directory, identities of the directory and its ancestors)
    pending: list[tuple[str, frozenset[tuple[int, int]]]] = [(root, frozenset({root_key}))]

    while pending:
        directory, ancestors = pending.pop()
        try:
            entries = os.scandir(directory)
        except OSError as exc:
            logger.debug("Skipping unreadable directory", extra={"path": directory, "error": repr(exc)})
            continue

        with entries:
            try:
                for entry in entries:
                    # A bad entry (e.g. a self-referencing symlink) must not cost its siblings
                    try:
                        is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
                        key = _dir_key(entry.stat(follow_symlinks=follow_symlinks)) if is_dir else None
                        skip_symlink = not is_dir and not follow_symlinks and entry.is_symlink()
                    except OSError as exc:
                        logger.debug(
                            "Skipping unreachable entry",
                            extra={"path": entry.path, "error": repr(exc)},
                        )
                        continue

                    if key is not None:
                        if key in ancestors:
                            logger.debug("Skipping directory cycle", extra={"path": entry.path})
                            continue
                        pending.append((entry.path, ancestors | {key}))
                    elif skip_symlink:
                        logger.debug("Skipping symlink", extra={"path": entry.path})
                    else:
                        total += count_file(entry.path, k)
            except OSError as exc:
                logger.debug(
                    "Directory listing stopped early",
                    extra={"path": directory, "total_so_far": total, "error": repr(exc)},
                )

    return total


def count_path(path: StrPath, k: int) -> int:
    """
    Count k-mers under ``path``, whatever it is.

    Directories are walked, regular files are sniffed, and everything else
    (including paths that do not exist) contributes 0.
    """
    path = os.fspath(path)
    if os.path.isdir(path):
        return walk_directory(path, k)
    return count_file(path, k)
