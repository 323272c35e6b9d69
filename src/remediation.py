"""
Remediation Module for CVE-2025-55182
Backs up package.json and installs the patched React release with npm
"""

import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from packaging.version import InvalidVersion, Version

from scanner import (
    COMPANION_PACKAGE,
    MANIFEST_NAME,
    TARGET_PACKAGE,
    ScanConfig,
    VulnerabilityFinding,
    is_valid_version,
)


STATUS_UPDATED = "updated"
STATUS_FAILED = "failed"
STATUS_DRY_RUN = "dry-run"


@dataclass
class UpdateOutcome:
    """Result of one update attempt"""
    directory: Path
    target_version: str
    status: str
    command: List[str] = field(default_factory=list)
    backup_path: Optional[Path] = None
    backup_error: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_UPDATED

    def to_dict(self) -> Dict:
        return {
            "directory": str(self.directory),
            "target_version": self.target_version,
            "status": self.status,
            "command": " ".join(self.command),
            "backup": str(self.backup_path) if self.backup_path else None,
            "backup_error": self.backup_error,
            "error": self.error,
        }


@dataclass
class RemediationSummary:
    """Counts for the interactive update loop"""
    found: int = 0
    updated: int = 0
    failed: int = 0
    skipped: int = 0
    previewed: int = 0
    outcomes: List[UpdateOutcome] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return self.found - self.updated

    def record(self, outcome: UpdateOutcome):
        self.outcomes.append(outcome)
        if outcome.status == STATUS_UPDATED:
            self.updated += 1
        elif outcome.status == STATUS_DRY_RUN:
            self.previewed += 1
        else:
            self.failed += 1

    def to_dict(self) -> Dict:
        return {
            "found": self.found,
            "updated": self.updated,
            "failed": self.failed,
            "skipped": self.skipped,
            "previewed": self.previewed,
            "remaining": self.remaining,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class Remediator:
    """Handles patching of vulnerable React projects"""

    backup_marker = ".backup."

    def __init__(self, config: Optional[ScanConfig] = None, session_logger=None):
        self.config = config or ScanConfig()
        self.session_logger = session_logger

    def create_backup(self, file_path: Path) -> Path:
        """
        Copy a file next to itself with a timestamp suffix

        Args:
            file_path: Path to file to backup

        Returns:
            Path to backup file

        Raises:
            OSError: If the copy fails
        """
        timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        backup_path = Path(f"{file_path}{self.backup_marker}{timestamp}")
        shutil.copy2(file_path, backup_path)
        return backup_path

    def build_install_command(self, target_version: str, npm: str = "npm") -> List[str]:
        return [
            npm,
            "install",
            f"{TARGET_PACKAGE}@{target_version}",
            f"{COMPANION_PACKAGE}@{target_version}",
            "--save",
            "--legacy-peer-deps",
        ]

    def validate_target(self, target_version: str):
        """Reject anything that is not a plain release version"""
        if not is_valid_version(target_version) or target_version[0] in "^~":
            raise ValueError(f"Invalid version string: {target_version}")
        try:
            parsed = Version(target_version)
        except InvalidVersion as e:
            raise ValueError(f"Invalid version string: {target_version}") from e
        if str(parsed) != target_version:
            raise ValueError(f"Invalid version string: {target_version}")

    def update_project(self, finding: VulnerabilityFinding) -> UpdateOutcome:
        """
        Update React in one project

        Args:
            finding: The vulnerable project

        Returns:
            UpdateOutcome describing what happened
        """
        directory = Path(finding.directory)
        target = finding.remediation_version
        outcome = UpdateOutcome(
            directory=directory,
            target_version=target,
            status=STATUS_FAILED,
            command=self.build_install_command(target),
        )

        if self.config.dry_run:
            outcome.status = STATUS_DRY_RUN
            return self._finish(outcome)

        manifest = finding.manifest_path or directory / MANIFEST_NAME
        try:
            outcome.backup_path = self.create_backup(Path(manifest))
        except OSError as e:
            outcome.backup_error = f"Could not create backup: {e}"

        try:
            self.validate_target(target)
        except ValueError as e:
            outcome.error = str(e)
            return self._finish(outcome)

        npm = shutil.which("npm")
        if npm is None:
            outcome.error = "npm not found in PATH"
            return self._finish(outcome)

        outcome.command = self.build_install_command(target, npm)
        try:
            result = subprocess.run(
                outcome.command,
                cwd=str(directory),
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds
            )
        except subprocess.TimeoutExpired:
            outcome.error = f"npm install timed out after {self.config.timeout_seconds}s"
            return self._finish(outcome)
        except OSError as e:
            outcome.error = str(e)
            return self._finish(outcome)

        if result.returncode != 0:
            stderr = (result.stderr or "").strip().splitlines()
            detail = stderr[-1] if stderr else "no output"
            outcome.error = f"npm install exited with {result.returncode}: {detail}"
            return self._finish(outcome)

        outcome.status = STATUS_UPDATED
        return self._finish(outcome)

    def _finish(self, outcome: UpdateOutcome) -> UpdateOutcome:
        if self.session_logger:
            self.session_logger.log_update(outcome)
        return outcome


def is_affirmative(answer: Optional[str]) -> bool:
    return (answer or "").strip().lower() in ("y", "yes")


def run_update_loop(
    findings: Iterable[VulnerabilityFinding],
    remediator: Remediator,
    confirm: Callable[[VulnerabilityFinding, int, int], bool],
    on_outcome: Optional[Callable[[UpdateOutcome], None]] = None,
) -> RemediationSummary:
    """
    Ask about each finding in turn and update the confirmed ones

    Args:
        findings: Vulnerable projects, in report order
        remediator: Performs the update
        confirm: Called with (finding, index, total), True to update
        on_outcome: Optional callback for each update result

    Returns:
        RemediationSummary for the whole loop
    """
    findings = list(findings)
    summary = RemediationSummary(found=len(findings))

    for index, finding in enumerate(findings, 1):
        if not confirm(finding, index, len(findings)):
            summary.skipped += 1
            continue

        outcome = remediator.update_project(finding)
        summary.record(outcome)
        if on_outcome:
            on_outcome(outcome)

    return summary
