"""Persist adapted artifacts to disk."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from .logging import get_logger, log_failure
from .models import AdaptedArtifact


@dataclass(frozen=True)
class WriteFailure:
    path: Path
    error: str


@dataclass
class WriteReport:
    """Outcome of one writer pass."""

    written: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)
    planned: List[Path] = field(default_factory=list)
    failures: List[WriteFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    def merge(self, other: "WriteReport") -> None:
        self.written.extend(other.written)
        self.unchanged.extend(other.unchanged)
        self.planned.extend(other.planned)
        self.failures.extend(other.failures)


class ArtifactWriter:
    """Writes artifact content verbatim, creating parent directories.

    Files the artifacts do not name are never touched. A failing artifact is
    recorded and the remaining ones are still written.
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run
        self.logger = get_logger("writer")

    def write(self, artifacts: Iterable[AdaptedArtifact]) -> WriteReport:
        report = WriteReport(dry_run=self.dry_run)
        for artifact in artifacts:
            path = Path(artifact.path)
            if self.dry_run:
                report.planned.append(path)
                self.logger.info("Would write %s (%d chars)", path, artifact.character_count)
                continue
            try:
                if path.is_file() and path.read_text(encoding="utf-8") == artifact.content:
                    report.unchanged.append(path)
                    self.logger.debug("Unchanged %s", path)
                    continue
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(artifact.content, encoding="utf-8")
            except (OSError, UnicodeError) as exc:
                report.failures.append(WriteFailure(path=path, error=str(exc)))
                log_failure(self.logger, f"Failed to write {path}", exc, level=logging.WARNING)
                continue
            report.written.append(path)
            self.logger.debug("Wrote %s", path)
        return report


__all__ = ["ArtifactWriter", "WriteFailure", "WriteReport"]
