"""
CVE-2025-55182 Scanner Module
Finds package.json manifests and detects vulnerable React versions
"""

import json
import os
import re
import stat
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional, Set, Tuple


CVE_ID = "CVE-2025-55182"
TARGET_PACKAGE = "react"
COMPANION_PACKAGE = "react-dom"
MANIFEST_NAME = "package.json"

MAX_DEPTH = 10
TIMEOUT_SECONDS = 60

# Directory names never descended into
EXCLUDE_DIRS: Set[str] = {
    "node_modules",
    ".git",
    ".svn",
    ".hg",
    ".next",
    ".nuxt",
    "dist",
    "build",
    ".cache",
    "coverage",
}

# (major, minor, patch) -> patched version
VULNERABLE_RANGES: Dict[Tuple[str, str, str], str] = {
    ("19", "0", "0"): "19.0.1",
    ("19", "1", "0"): "19.1.2",
    ("19", "1", "1"): "19.1.2",
    ("19", "2", "0"): "19.2.1",
}

VERSION_PATTERN = re.compile(r"^[~^]?\d+\.\d+\.\d+")

DEPENDENCY_GROUPS = ("dependencies", "devDependencies")


class ManifestError(ValueError):
    """Raised when a manifest cannot be read or is not valid JSON"""


@dataclass
class ScanConfig:
    """Configuration for a scan and remediation run"""
    # Deepest directory level entered below each root
    max_depth: int = MAX_DEPTH
    # Seconds before an npm install is abandoned
    timeout_seconds: int = TIMEOUT_SECONDS
    # Print actions instead of performing them
    dry_run: bool = False
    exclude_dirs: Set[str] = field(default_factory=lambda: set(EXCLUDE_DIRS))


@dataclass(frozen=True)
class ManifestRecord:
    """A parsed package.json, reduced to the declared React version"""
    path: Path
    declared_version: Optional[str] = None


@dataclass(frozen=True)
class VulnerabilityFinding:
    """A project whose declared React version is vulnerable"""
    directory: Path
    remediation_version: str
    declared_version: str = ""
    manifest_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "cve_id": CVE_ID,
            "package": TARGET_PACKAGE,
            "directory": str(self.directory),
            "manifest": str(self.manifest_path) if self.manifest_path else None,
            "declared_version": self.declared_version,
            "remediation_version": self.remediation_version,
        }


@dataclass
class ScanResult:
    """Accumulates everything a scan produces"""
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    roots: List[str] = field(default_factory=list)
    manifests_scanned: int = 0
    manifests_skipped: int = 0
    findings: List[VulnerabilityFinding] = field(default_factory=list)

    @property
    def vulnerable_found(self) -> int:
        return len(self.findings)

    @property
    def duration_seconds(self) -> float:
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    def to_dict(self) -> Dict:
        return {
            "cve_id": CVE_ID,
            "roots": self.roots,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_seconds": self.duration_seconds,
            "summary": {
                "manifests_scanned": self.manifests_scanned,
                "manifests_skipped": self.manifests_skipped,
                "vulnerable_projects": self.vulnerable_found,
            },
            "findings": [f.to_dict() for f in self.findings],
        }


def is_valid_version(version) -> bool:
    """Check that a version looks like [^~]MAJOR.MINOR.PATCH[...]"""
    if not version or not isinstance(version, str):
        return False
    return VERSION_PATTERN.match(version) is not None


def classify(version) -> Optional[str]:
    """
    Classify a declared React version

    Args:
        version: Version string from package.json (e.g. "^19.1.0")

    Returns:
        The patched version to upgrade to, or None if not vulnerable
    """
    if not is_valid_version(version):
        return None

    clean = version[1:] if version[0] in "^~" else version
    clean = clean.split("-")[0]
    parts = clean.split(".")
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else ""
    patch = parts[2] if len(parts) > 2 else "0"

    return VULNERABLE_RANGES.get((major, minor, patch))


def find_package_json_files(
    root_path,
    max_depth: int = MAX_DEPTH,
    exclude_dirs: Optional[Iterable[str]] = None,
) -> Generator[Path, None, None]:
    """
    Find package.json files under a directory

    Symlinks are never followed and unreadable entries are skipped.

    Args:
        root_path: Directory to walk
        max_depth: Deepest directory level to enter (root is 0)
        exclude_dirs: Names to skip, defaults to EXCLUDE_DIRS

    Yields:
        Path of each package.json found
    """
    excluded = EXCLUDE_DIRS if exclude_dirs is None else set(exclude_dirs)

    def walk_dir(current: Path, depth: int):
        if depth > max_depth:
            return

        try:
            names = os.listdir(current)
        except OSError:
            return

        for name in names:
            if name in excluded:
                continue

            entry = current / name
            try:
                mode = entry.lstat().st_mode
            except OSError:
                continue

            if stat.S_ISLNK(mode):
                continue

            if stat.S_ISDIR(mode):
                yield from walk_dir(entry, depth + 1)
            elif name == MANIFEST_NAME:
                yield entry

    yield from walk_dir(Path(root_path), 0)


def read_manifest(manifest_path: Path) -> ManifestRecord:
    """
    Parse a package.json file

    Args:
        manifest_path: Path to package.json

    Returns:
        ManifestRecord with the React version from dependencies,
        falling back to devDependencies

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Could not parse {manifest_path}: {e}") from e

    declared = None
    if isinstance(data, dict):
        for group in DEPENDENCY_GROUPS:
            deps = data.get(group)
            if isinstance(deps, dict) and deps.get(TARGET_PACKAGE):
                declared = deps[TARGET_PACKAGE]
                break

    if not isinstance(declared, str):
        declared = None

    return ManifestRecord(path=Path(manifest_path), declared_version=declared)


class CVEScanner:
    """Scanner for CVE-2025-55182 vulnerability"""

    def __init__(self, config: Optional[ScanConfig] = None, session_logger=None):
        self.config = config or ScanConfig()
        self.session_logger = session_logger

    def analyze_manifest(self, manifest_path: Path) -> Optional[VulnerabilityFinding]:
        """
        Analyze a single package.json

        Raises:
            ManifestError: If the manifest is unreadable
        """
        record = read_manifest(manifest_path)
        if not record.declared_version:
            return None

        patched = classify(record.declared_version)
        if not patched:
            return None

        return VulnerabilityFinding(
            directory=record.path.parent,
            remediation_version=patched,
            declared_version=record.declared_version,
            manifest_path=record.path,
        )

    def scan_directory(self, root_path, result: Optional[ScanResult] = None,
                       on_finding=None) -> ScanResult:
        """
        Scan one directory tree, adding to result

        Args:
            root_path: Directory to scan
            result: Accumulator to fill, a new one is created if omitted
            on_finding: Optional callback invoked with each finding

        Returns:
            The accumulator
        """
        return self.scan_paths([root_path], result=result, on_finding=on_finding)

    def scan_paths(self, roots: Iterable, result: Optional[ScanResult] = None,
                   on_root=None, on_finding=None) -> ScanResult:
        """
        Scan several roots in order

        Missing roots are skipped. A manifest reachable from two roots is
        only analyzed once.
        """
        if result is None:
            result = ScanResult()
        seen: Set[str] = set()

        for root in roots:
            root = Path(root)
            if not os.path.exists(root):
                continue

            result.roots.append(str(root))
            if on_root:
                on_root(root)
            if self.session_logger:
                self.session_logger.log_scan_start(str(root))

            manifests = find_package_json_files(
                root, self.config.max_depth, self.config.exclude_dirs
            )
            for manifest in manifests:
                key = os.path.realpath(manifest)
                if key in seen:
                    continue
                seen.add(key)

                result.manifests_scanned += 1
                try:
                    finding = self.analyze_manifest(manifest)
                except ManifestError as e:
                    result.manifests_skipped += 1
                    if self.session_logger:
                        self.session_logger.log_skipped(manifest, e)
                    continue

                if finding:
                    result.findings.append(finding)
                    if self.session_logger:
                        self.session_logger.log_finding(finding)
                    if on_finding:
                        on_finding(finding)

        result.end_time = datetime.now()
        return result
