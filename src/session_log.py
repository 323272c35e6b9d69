"""
Session logging for react2shell-check
One text log per run plus a findings file rewritten as projects are found
"""

import json
from datetime import datetime
from pathlib import Path

RULE = "=" * 80


class SessionLogger:
    """Records one scan-and-update run under a log directory"""

    def __init__(self, log_dir):
        self.started = datetime.now()
        self.session_id = self.started.strftime("%Y%m%d_%H%M%S")
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f"session_{self.session_id}.log"
        self.findings_file = self.log_dir / f"findings_{self.session_id}.json"
        self.all_findings = []

        self.log_file.write_text(
            self._block("REACT2SHELL-CHECK SESSION LOG", [
                f"Session ID:  {self.session_id}",
                f"Started:     {self.started:%Y-%m-%d %H:%M:%S}",
                f"Findings:    {self.findings_file}",
            ]) + "\n",
            encoding="utf-8",
        )

    @staticmethod
    def _block(title: str, lines) -> str:
        return "\n".join([RULE, title, RULE, *lines, RULE, ""])

    def _append(self, text: str):
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(text)

    def log(self, message: str, level: str = "INFO"):
        """Append one `[HH:MM:SS] [LEVEL] message` line"""
        self._append(f"[{datetime.now():%H:%M:%S}] [{level}] {message}\n")

    def log_scan_start(self, target: str):
        self.log(f"SCAN START: {target}", "SCAN")

    def log_skipped(self, manifest, error: Exception):
        """A package.json that could not be read or parsed"""
        self.log(f"SKIPPED MANIFEST: {manifest} | {error}", "WARN")

    def log_scan_result(self, manifests: int, skipped: int, findings: int, duration: float):
        self.log(
            f"SCAN COMPLETE: Manifests: {manifests} | Skipped: {skipped} | "
            f"Findings: {findings} | Duration: {duration:.2f}s",
            "SCAN",
        )

    def log_finding(self, finding):
        """Log a vulnerable project and refresh the findings file"""
        self.all_findings.append(finding.to_dict())
        self.log(f"FINDING: react {finding.declared_version} -> {finding.remediation_version}", "VULN")
        self.log(f"  Directory: {finding.directory}", "VULN")

        report = {
            "session_id": self.session_id,
            "updated_at": datetime.now().isoformat(),
            "total_findings": len(self.all_findings),
            "findings": self.all_findings,
        }
        with open(self.findings_file, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)

    def log_update(self, outcome):
        """Log the result of one update attempt"""
        if outcome.backup_error:
            self.log(f"BACKUP FAILED: {outcome.directory} | {outcome.backup_error}", "WARN")
        level = "WARN" if outcome.status == "failed" else "FIX"
        message = f"UPDATE {outcome.status.upper()}: {outcome.directory} -> react@{outcome.target_version}"
        if outcome.error:
            message += f" | {outcome.error}"
        self.log(message, level)

    def log_summary(self, found: int, updated: int, failed: int, skipped: int):
        self._append("\n" + self._block("SESSION SUMMARY", [
            f"Vulnerable:     {found}",
            f"Updated:        {updated}",
            f"Failed:         {failed}",
            f"Skipped:        {skipped}",
            f"Duration:       {(datetime.now() - self.started).total_seconds():.2f}s",
        ]))

    def get_log_path(self) -> str:
        return str(self.log_file)

    def get_findings_path(self) -> str:
        return str(self.findings_file)
