#!/usr/bin/env python3
"""
react2shell-check - CVE-2025-55182 Scanner CLI
Finds vulnerable React installations and offers to update them

Usage:
    react2shell-check                      # Scan home (and system paths as root)
    react2shell-check PATH [PATH...]       # Scan specific paths
    react2shell-check --dry-run            # Preview updates without changes
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.theme import Theme

from remediation import (
    STATUS_DRY_RUN,
    RemediationSummary,
    Remediator,
    UpdateOutcome,
    is_affirmative,
    run_update_loop,
)
from scanner import (
    CVE_ID,
    MAX_DEPTH,
    TIMEOUT_SECONDS,
    CVEScanner,
    ScanConfig,
    ScanResult,
    VulnerabilityFinding,
)
from search_paths import default_search_paths, is_elevated
from session_log import SessionLogger


theme = Theme({
    "info": "bright_cyan",
    "warning": "bright_yellow",
    "danger": "bright_red bold",
    "success": "bright_green",
    "path": "bright_blue",
    "command": "bright_green italic",
    "title": "bold bright_white",
    "dryrun": "bright_blue",
})

console = Console(theme=theme)
app = typer.Typer(
    name="react2shell-check",
    help="Scan for React versions vulnerable to CVE-2025-55182 and update them",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def print_banner(dry_run: bool):
    console.print(Panel(
        "[title]React CVE-2025-55182 Vulnerability Scanner (React2Shell)[/title]\n\n"
        "[warning]⚠️  CVE-2025-55182: CRITICAL (CVSS 10.0)[/warning]\n"
        "Unauthenticated Remote Code Execution in React Server Components\n"
        "Actively exploited in the wild - Immediate patching required",
        border_style="bright_cyan",
        padding=(0, 2),
    ))
    if dry_run:
        console.print("[dryrun][DRY-RUN MODE] - No changes will be made[/dryrun]")
    console.print()


def print_finding(finding: VulnerabilityFinding):
    """Print a single vulnerable project"""
    console.print(f"[danger]⚠️  VULNERABLE: React {escape(finding.declared_version)}[/danger]")
    console.print(f"   📁 Location: [path]{escape(str(finding.directory))}[/path]")
    console.print(f"   🔒 {CVE_ID}: Remote Code Execution")
    console.print(f"   📦 Update to: {finding.remediation_version}")
    console.print()


def print_critical_panel(count: int):
    console.print(Panel(
        f"[danger]CRITICAL: {count} Vulnerable Installation(s) Found[/danger]\n\n"
        f"These installations are vulnerable to {CVE_ID}:\n"
        "• Unauthenticated Remote Code Execution\n"
        "• CVSS Score: 10.0 (CRITICAL)\n"
        "• Actively exploited in the wild",
        border_style="bright_red",
    ))
    console.print("[title]=== Update Vulnerable Projects ===[/title]")
    console.print()


def confirm_update(finding: VulnerabilityFinding, index: int, total: int) -> bool:
    """Prompt for one project, True when the user agrees"""
    console.print(f"[warning]Project {index}/{total}: {escape(str(finding.directory))}[/warning]")
    try:
        answer = console.input(f"   Update to React {finding.remediation_version}? (y/n): ")
    except EOFError:
        answer = ""

    if is_affirmative(answer):
        console.print(f"\n📦 Updating React to {finding.remediation_version}...")
        console.print(f"   📁 In: [path]{escape(str(finding.directory))}[/path]")
        return True

    console.print("   ⏭️  Skipped")
    console.print()
    return False


def print_outcome(outcome: UpdateOutcome):
    """Print the result of one update"""
    if outcome.status == STATUS_DRY_RUN:
        console.print(
            f"[dryrun]   [DRY-RUN] Would execute: {escape(' '.join(outcome.command))}[/dryrun]"
        )
    else:
        if outcome.backup_error:
            console.print(f"[warning]   ⚠️  {escape(outcome.backup_error)}[/warning]")
        elif outcome.backup_path:
            console.print(f"   💾 Backup created: {escape(outcome.backup_path.name)}")

        if outcome.succeeded:
            console.print("[success]   ✅ Successfully updated![/success]")
        else:
            console.print(f"[danger]   ❌ Update failed: {escape(outcome.error or 'unknown error')}[/danger]")
    console.print()


def print_summary(result: ScanResult, summary: RemediationSummary):
    """Print the final summary panel"""
    lines = [
        f"Manifests scanned: {result.manifests_scanned}"
        + (f" ({result.manifests_skipped} skipped)" if result.manifests_skipped else ""),
    ]

    if summary.found == 0:
        lines.append("[success]✅ No vulnerable versions found![/success]")
        lines.append(f"Your system is protected against {CVE_ID}")
    else:
        lines.append(f"[danger]⚠️  {summary.found} vulnerable installation(s) found[/danger]")
        lines.append(f"[success]✅ {summary.updated} project(s) updated[/success]")
        if summary.failed:
            lines.append(f"[danger]❌ {summary.failed} update(s) failed[/danger]")
        if summary.previewed:
            lines.append(f"[dryrun]🔎 {summary.previewed} update(s) previewed (dry run)[/dryrun]")

        if summary.remaining > 0:
            lines.append(f"[warning]⚠️  {summary.remaining} project(s) remain vulnerable[/warning]")
            lines.append("")
            lines.append("[title]IMMEDIATE ACTION REQUIRED:[/title]")
            lines.append("• Update remaining projects manually")
            lines.append("• Review security logs for exploitation attempts")
            lines.append("• Consider temporary mitigations (WAF rules, network isolation)")

    console.print()
    console.print(Panel("\n".join(lines), title="SUMMARY", border_style="bright_white"))
    console.print()


def write_report(output: Path, result: ScanResult, summary: RemediationSummary, dry_run: bool):
    """Save a JSON report of the run"""
    report = result.to_dict()
    report["dry_run"] = dry_run
    report["remediation"] = summary.to_dict()
    with open(output, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    console.print(f"[info]Report saved to: {escape(str(output))}[/info]")


@app.command()
def check(
    paths: Optional[List[Path]] = typer.Argument(
        None, help="Directories to scan (default: home directory, plus system paths as root)"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Preview changes without making modifications"
    ),
    max_depth: int = typer.Option(MAX_DEPTH, "--depth", "-d", help="Maximum directory depth"),
    timeout: int = typer.Option(
        TIMEOUT_SECONDS, "--timeout", "-t", help="Seconds to wait for each npm install"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save JSON report to file"),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Write a session log and findings file to this directory"
    ),
):
    """
    Scan for React installations vulnerable to CVE-2025-55182

    Each vulnerable project is listed, then you are asked whether to run
    npm install with the patched version. package.json is backed up first.
    """
    config = ScanConfig(max_depth=max_depth, timeout_seconds=timeout, dry_run=dry_run)
    session_logger = SessionLogger(log_dir) if log_dir else None

    print_banner(dry_run)

    if paths:
        roots = list(paths)
    else:
        elevated = is_elevated()
        roots = default_search_paths(elevated)
        if not elevated:
            console.print(
                "[info]Not running as root/admin: system-wide locations "
                "(Docker, /opt, /srv, /usr/local) are skipped.[/info]"
            )
            console.print()

    console.print("[title]=== Scanning for Vulnerable React Installations ===[/title]")
    console.print()

    scanner = CVEScanner(config, session_logger=session_logger)
    result = scanner.scan_paths(
        roots,
        on_root=lambda root: console.print(f"[info]Scanning: {escape(str(root))}[/info]"),
        on_finding=print_finding,
    )

    if session_logger:
        session_logger.log_scan_result(
            result.manifests_scanned,
            result.manifests_skipped,
            result.vulnerable_found,
            result.duration_seconds,
        )

    if result.findings:
        print_critical_panel(result.vulnerable_found)
        remediator = Remediator(config, session_logger=session_logger)
        summary = run_update_loop(
            result.findings, remediator, confirm_update, on_outcome=print_outcome
        )
    else:
        summary = RemediationSummary()

    print_summary(result, summary)

    if session_logger:
        session_logger.log_summary(summary.found, summary.updated, summary.failed, summary.skipped)
        console.print(f"[info]📝 Session log saved: {escape(session_logger.get_log_path())}[/info]")
        if session_logger.all_findings:
            console.print(f"[info]📝 Findings saved: {escape(session_logger.get_findings_path())}[/info]")

    if output:
        write_report(output, result, summary, dry_run)


def main():
    """Entry point for the console script"""
    app()


if __name__ == "__main__":
    main()
