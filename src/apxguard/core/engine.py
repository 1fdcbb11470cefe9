#!/usr/bin/env python3
"""
APXGUARD ENGINE - Repository Scanner & Aggregator
-------------------------------------------------
Discovers config-guard candidates in a registry tree and a flat local
packs directory, summarizes each one, and folds the survivors into a
single AggregateReport ordered by severity.

Every failure mode degrades to "contributes nothing": missing roots,
unreadable directories and unreadable files never abort a scan.

Author: APX Guard Team
Date: 2026-10-19
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from apxguard.core.models import AggregateReport, PackGuardSummary
from apxguard.extraction.pipeline import GuardPipeline

logger = logging.getLogger("apxguard.engine")

REGISTRY_FILENAME = "pack.yaml"
LOCAL_EXTENSIONS = (".yaml", ".yml")
DEFAULT_REGISTRY_ROOT = ".apx/registry"
DEFAULT_LOCAL_ROOT = "packs/config-guard"

PathLike = Union[str, Path]


def _sorted_entries(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


def collect_registry_packs(root: Optional[PathLike]) -> List[Path]:
    """
    Walks the registry tree depth-first with an explicit stack, collecting
    every regular file named pack.yaml. Symlinked entries are not followed.
    """
    if root is None or not Path(root).is_dir():
        return []

    files = []
    stack = [Path(root)]
    while stack:
        directory = stack.pop()
        try:
            entries = _sorted_entries(directory)
        except OSError as e:
            logger.debug(f"Skipping unreadable registry directory {directory}: {e}")
            continue

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                stack.append(Path(entry.path))
            elif entry.is_file(follow_symlinks=False) and entry.name == REGISTRY_FILENAME:
                files.append(Path(entry.path))
    return files


def collect_local_packs(root: Optional[PathLike]) -> List[Path]:
    """Lists the immediate markup files of the local packs directory."""
    if root is None or not Path(root).is_dir():
        return []

    try:
        entries = _sorted_entries(Path(root))
    except OSError as e:
        logger.warning(f"Unable to list local packs in {root}: {e}")
        return []

    return [
        Path(entry.path) for entry in entries
        if entry.is_file(follow_symlinks=False) and entry.name.endswith(LOCAL_EXTENSIONS)
    ]


def find_candidates(registry_root: Optional[PathLike], local_root: Optional[PathLike]) -> List[Path]:
    """Registry candidates first, then local ones; scan order decides collisions."""
    return collect_registry_packs(registry_root) + collect_local_packs(local_root)


def aggregate(summaries: Iterable[PackGuardSummary]) -> AggregateReport:
    """
    Keeps the first summary per (id, version), orders survivors by
    missing_env + stale_secrets descending (stable), and totals them.
    """
    seen = set()
    unique = []
    for summary in summaries:
        if summary.key in seen:
            continue
        seen.add(summary.key)
        unique.append(summary)

    ordered = sorted(unique, key=lambda pack: -pack.severity)
    return AggregateReport(
        total_packs=len(ordered),
        missing_env=sum(pack.missing_env for pack in ordered),
        stale_secrets=sum(pack.stale_secrets for pack in ordered),
        packs=tuple(ordered),
    )


class GuardEngine:
    """
    Principal orchestrator for a Config Guard Lite pass over a workspace.
    Roots are resolved against `workspace` (default: current directory).
    """

    def __init__(self, registry_root: PathLike = DEFAULT_REGISTRY_ROOT,
                 local_root: PathLike = DEFAULT_LOCAL_ROOT,
                 workspace: Optional[PathLike] = None):
        base = Path(workspace) if workspace is not None else Path.cwd()
        self.registry_root = (base / registry_root).resolve()
        self.local_root = (base / local_root).resolve()
        self.pipeline = GuardPipeline()

    def candidates(self) -> List[Path]:
        return find_candidates(self.registry_root, self.local_root)

    def summaries(self) -> List[PackGuardSummary]:
        results = []
        for path in self.candidates():
            summary = self.pipeline.summarize_file(path)
            if summary is not None:
                results.append(summary)
        logger.info(f"Config Guard: {len(results)} qualifying pack file(s)")
        return results

    def run(self) -> Optional[AggregateReport]:
        """Returns the aggregate report, or None when no pack qualifies."""
        report = aggregate(self.summaries())
        if not report.total_packs:
            return None
        return report


def summarize_config_guard_lite(registry_root: PathLike = DEFAULT_REGISTRY_ROOT,
                                local_root: PathLike = DEFAULT_LOCAL_ROOT,
                                workspace: Optional[PathLike] = None) -> Optional[AggregateReport]:
    return GuardEngine(registry_root, local_root, workspace).run()
