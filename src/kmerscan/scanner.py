from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable, Sequence

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from core.logging import logger_kmer as logger
from core.settings import get_settings
from kmerscan.schemas import RootTotal, ScanReport, ScanTarget
from kmerscan.walker import count_path


def build_targets(paths: Iterable[str | os.PathLike[str]], k: int) -> list[ScanTarget]:
    """
    Validate the caller's paths and k into scan targets.

    Raises:
        ValidationError: k is not a positive integer or a path is empty
    """
    targets: list[ScanTarget] = []
    for path in paths:
        try:
            targets.append(ScanTarget(path=os.fspath(path), k=k))
        except PydanticValidationError as exc:
            raise ValidationError(
                message="Invalid scan target",
                details="; ".join(err["msg"] for err in exc.errors()),
                context={"path": os.fspath(path), "k": k},
                original_exception=exc,
            ) from exc
    return targets


async def scan(targets: Sequence[ScanTarget]) -> ScanReport:
    """
    Scan every target and collect the per-root totals.

    Each root is counted in a worker thread; at most
    KMER_MAX_CONCURRENT_SCANS roots are in flight at once (one by default,
    which keeps the scan strictly sequential).
    """
    settings = get_settings()
    semaphore = asyncio.Semaphore(settings.KMER_MAX_CONCURRENT_SCANS)

    async def _scan_one(target: ScanTarget) -> RootTotal:
        async with semaphore:
            logger.debug("Scanning root", extra={"path": target.path, "k": target.k})
            total = await asyncio.to_thread(count_path, target.path, target.k)
        logger.info("Root scanned", extra={"path": target.path, "k": target.k, "total": total})
        return RootTotal(path=target.path, total=total)

    roots = await asyncio.gather(*(_scan_one(target) for target in targets))
    report = ScanReport(roots=list(roots))
    logger.info("Scan complete", extra={"roots": len(report.roots), "total": report.total})
    return report


async def count_paths(paths: Iterable[str | os.PathLike[str]], k: int) -> int:
    """Grand total of k-mer positions under ``paths``."""
    report = await scan(build_targets(paths, k))
    return report.total
