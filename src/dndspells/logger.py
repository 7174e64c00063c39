"""Markdown run reports for scrape runs."""

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class PipelineLogger:
    """Collect per-spell outcomes and write them as a timestamped markdown report.

    Safe to call from worker threads.
    """

    def __init__(self, stage_name: str, log_dir: Path = Path("data/logs")):
        """Initialize logger for a run.

        Args:
            stage_name: Name used in the report title and filename (e.g., "scrape")
            log_dir: Directory to store report files
        """
        self.stage_name = stage_name
        self.log_dir = log_dir
        self.start_time = datetime.now(tz=timezone.utc)

        # YYYY-MM-DD-HH-MM-stage.md
        timestamp = self.start_time.strftime("%Y-%m-%d-%H-%M")
        self.log_path = log_dir / f"{timestamp}-{stage_name}.md"

        self.successful: list[str] = []
        self.failed: list[tuple[str, str]] = []
        self.skipped: list[str] = []
        self.details: list[str] = []
        self._lock = threading.Lock()

    def log_success(self, item: str, details: str = "") -> None:
        """Log a spell that was stored."""
        with self._lock:
            self.successful.append(f"- ✅ {item}: {details}" if details else f"- ✅ {item}")

    def log_failure(self, item: str, error: str) -> None:
        """Log a spell that failed to fetch, parse or store.

        Args:
            item: Spell identifier
            error: Error message (may span several lines)
        """
        with self._lock:
            self.failed.append((item, error))

    def log_skip(self, item: str, reason: str = "") -> None:
        """Log a spell that was intentionally not stored (excluded, already present)."""
        with self._lock:
            self.skipped.append(f"- ⊘ {item}: {reason}" if reason else f"- ⊘ {item}")

    def log_detail(self, message: str) -> None:
        with self._lock:
            self.details.append(message)

    def render(self, additional_summary: dict[str, Any] | None = None) -> str:
        """Render the report as markdown."""
        duration = datetime.now(tz=timezone.utc) - self.start_time
        seconds = duration.total_seconds()
        started = self.start_time.strftime("%Y-%m-%d %H:%M:%S")

        lines = [
            f"# {self.stage_name.capitalize()} Report - {started} UTC",
            "",
            f"**Started:** {started} UTC",
            f"**Duration:** {int(seconds // 60)}m {int(seconds % 60)}s",
            "",
            "## Summary",
            f"- ✅ {len(self.successful)} stored",
            f"- ❌ {len(self.failed)} failed",
            f"- ⊘ {len(self.skipped)} skipped",
        ]
        for key, value in (additional_summary or {}).items():
            lines.append(f"- {key}: {value}")
        lines.append("")

        if self.successful:
            lines.append("## Stored")
            lines.extend(self.successful)
            lines.append("")

        if self.failed:
            lines.append("## Failed")
            for item, error in self.failed:
                lines.append(f"- ❌ {item}")
                lines.extend(f"  {error_line}" for error_line in error.split("\n"))
            lines.append("")

        if self.skipped:
            lines.append("## Skipped")
            lines.extend(self.skipped)
            lines.append("")

        if self.details:
            lines.append("## Details")
            lines.extend(self.details)
            lines.append("")

        return "\n".join(lines)

    def write(self, additional_summary: dict[str, Any] | None = None) -> Path:
        """Write the report to log_dir.

        Returns:
            Path to the written report
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path.write_text(self.render(additional_summary), encoding="utf-8")
        return self.log_path
