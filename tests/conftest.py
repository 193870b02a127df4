"""
Pytest configuration and shared fixtures for kmerscan tests.

This file provides:
- Custom markers
- Settings cache isolation
- Builders for FASTA payloads and tar archives
"""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import pytest


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


@pytest.fixture(autouse=True)
def isolate_settings() -> Iterator[None]:
    """Drop the cached Settings so env overrides made by a test take effect."""
    from core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scan_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Set scanner settings through the environment, e.g. scan_env(KMER_MAX_ARCHIVE_DEPTH=0)."""
    from core.settings import get_settings

    def _set(**values: Any) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key, str(value))
        get_settings.cache_clear()

    return _set


def build_fasta(records: Mapping[str, str], line_width: int = 0, newline: str = "\n") -> bytes:
    """Render records as FASTA, optionally wrapping residues at ``line_width``."""
    lines: list[str] = []
    for header, residues in records.items():
        lines.append(f">{header}")
        if line_width and residues:
            lines.extend(residues[i : i + line_width] for i in range(0, len(residues), line_width))
        else:
            lines.append(residues)
    return (newline.join(lines) + newline).encode("ascii")


def build_tar(members: Mapping[str, bytes], compression: str = "") -> bytes:
    """Pack ``members`` (name -> payload) into an in-memory tar archive."""
    buf = io.BytesIO()
    mode = f"w:{compression}" if compression else "w"
    with tarfile.open(fileobj=buf, mode=mode) as archive:
        for name, payload in members.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(payload)
            archive.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


@pytest.fixture
def fasta() -> Callable[..., bytes]:
    """Factory fixture building FASTA payloads."""
    return build_fasta


@pytest.fixture
def make_tar() -> Callable[..., bytes]:
    """Factory fixture building tar archives."""
    return build_tar


class ForwardOnlyStream(io.RawIOBase):
    """Readable stream that refuses to seek, like a pipe or a streamed tar member."""

    def __init__(self, payload: bytes) -> None:
        self._inner = io.BytesIO(payload)

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def readinto(self, b: Any) -> int:
        data = self._inner.read(len(b))
        b[: len(data)] = data
        return len(data)


@pytest.fixture
def forward_only() -> Callable[[bytes], ForwardOnlyStream]:
    """Factory fixture wrapping bytes in a non-seekable stream."""
    return ForwardOnlyStream
