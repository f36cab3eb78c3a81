"""Pattern-based secret detection over raw text content."""

from collections import defaultdict
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.secrets.patterns import (
    SECRET_PATTERNS,
    SecretPattern,
    SecretSeverity,
)

logger = get_logger(__name__)

# Matches containing any of these are treated as documentation values
PLACEHOLDER_MARKERS = ("example", "placeholder", "your-", "xxx", "your_")
DUMMY_OPENAI_KEY = "sk-xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx"

SKIP_DIRS = {
    "node_modules", "venv", ".venv", "env",
    "__pycache__", ".git", ".hg", ".svn",
    "dist", "build", "target", "vendor",
    ".tox", ".mypy_cache", ".pytest_cache",
}

BINARY_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".pdf", ".zip", ".gz",
    ".tar", ".jar", ".class", ".so", ".dll", ".exe", ".woff", ".woff2",
    ".ttf", ".pyc", ".whl", ".mp3", ".mp4",
}

LOCK_FILE_SUFFIXES = (".lock", "-lock.json", "-lock.yaml")

MAX_FILE_SIZE = 1024 * 1024


class SecretMetadata(BaseModel):
    """Where a piece of scanned content came from."""

    file: str = ""
    commit: str = ""
    author: str = ""
    date: str = ""


class DetectedSecret(BaseModel):
    """A single pattern match in scanned content.

    The raw ``match`` is kept for in-process use only and is excluded from
    ``model_dump`` and JSON output.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Pattern id and match offset")
    pattern: SecretPattern
    match: str = Field(..., exclude=True, repr=False)
    redacted_match: str
    line: int
    column: int
    file: str = ""
    commit: str = ""
    author: str = ""
    date: str = ""

    @property
    def severity(self) -> SecretSeverity:
        return self.pattern.severity


def redact_secret(secret: str) -> str:
    """Mask a secret for safe display.

    Strings of 8 characters or fewer are fully masked. Longer strings keep
    ``min(4, len // 4)`` characters at each end. Length is preserved.

    Args:
        secret: The secret string.

    Returns:
        Masked version of the secret.
    """
    if len(secret) <= 8:
        return "*" * len(secret)

    keep = min(4, len(secret) // 4)
    return secret[:keep] + "*" * (len(secret) - 2 * keep) + secret[-keep:]


def is_placeholder(match: str) -> bool:
    """Check whether a match looks like a documentation placeholder."""
    lowered = match.lower()
    if lowered == DUMMY_OPENAI_KEY:
        return True
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def scan_for_secrets(
    content: str,
    metadata: SecretMetadata | None = None,
    patterns: tuple[SecretPattern, ...] = SECRET_PATTERNS,
) -> list[DetectedSecret]:
    """Scan text for hardcoded secrets.

    Every pattern is matched independently from the start of the content,
    so overlapping matches from different patterns are all reported.

    Args:
        content: Text to scan.
        metadata: Source file and commit information copied onto results.
        patterns: Pattern table to use.

    Returns:
        Detected secrets, grouped by pattern in table order and by offset
        within a pattern.
    """
    metadata = metadata or SecretMetadata()
    secrets: list[DetectedSecret] = []

    for secret_pattern in patterns:
        for match in secret_pattern.pattern.finditer(content):
            value = match.group(0)
            if is_placeholder(value):
                continue

            offset = match.start()
            line = content.count("\n", 0, offset) + 1
            column = offset - content.rfind("\n", 0, offset)

            secrets.append(
                DetectedSecret(
                    id=f"{secret_pattern.id}-{offset}",
                    pattern=secret_pattern,
                    match=value,
                    redacted_match=redact_secret(value),
                    line=line,
                    column=column,
                    file=metadata.file,
                    commit=metadata.commit,
                    author=metadata.author,
                    date=metadata.date,
                )
            )

    return secrets


def group_secrets_by_file(secrets: list[DetectedSecret]) -> dict[str, list[DetectedSecret]]:
    """Index secrets by source file, preserving order within each file."""
    grouped: dict[str, list[DetectedSecret]] = defaultdict(list)
    for secret in secrets:
        grouped[secret.file].append(secret)
    return dict(grouped)


def group_secrets_by_commit(secrets: list[DetectedSecret]) -> dict[str, list[DetectedSecret]]:
    """Index secrets by commit hash. Secrets without a commit share the ``""`` key."""
    grouped: dict[str, list[DetectedSecret]] = defaultdict(list)
    for secret in secrets:
        grouped[secret.commit].append(secret)
    return dict(grouped)


class SecretScanner:
    """File and directory front-end for :func:`scan_for_secrets`."""

    def __init__(
        self,
        patterns: tuple[SecretPattern, ...] = SECRET_PATTERNS,
        skip_dirs: set[str] | None = None,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        """Initialize secret scanner.

        Args:
            patterns: Pattern table to use.
            skip_dirs: Directory names never descended into.
            max_file_size: Files larger than this many bytes are skipped.
        """
        self.logger = get_logger(__name__)
        self.patterns = patterns
        self.skip_dirs = skip_dirs if skip_dirs is not None else SKIP_DIRS
        self.max_file_size = max_file_size

    def scan_text(self, content: str, metadata: SecretMetadata | None = None) -> list[DetectedSecret]:
        return scan_for_secrets(content, metadata, self.patterns)

    def scan_file(self, path: Path, metadata: SecretMetadata | None = None) -> list[DetectedSecret]:
        """Scan a single file.

        Args:
            path: File to scan.
            metadata: Source information; ``file`` defaults to ``path``.

        Returns:
            Detected secrets. Unreadable or binary files yield an empty list.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            self.logger.warning(f"Skipping binary file {path}")
            return []
        except OSError as e:
            self.logger.warning(f"Failed to read {path}: {e}")
            return []

        if metadata is None:
            metadata = SecretMetadata(file=str(path))
        elif not metadata.file:
            metadata = metadata.model_copy(update={"file": str(path)})

        return self.scan_text(content, metadata)

    def scan_directory(
        self,
        root: Path,
        commit: str = "",
        author: str = "",
        date: str = "",
    ) -> list[DetectedSecret]:
        """Scan every text file under a directory.

        Args:
            root: Directory to scan.
            commit: Commit hash recorded on every result.
            author: Commit author recorded on every result.
            date: Commit date recorded on every result.

        Returns:
            Detected secrets with repository-relative file names.
        """
        self.logger.info(f"Scanning {root} for secrets")
        secrets: list[DetectedSecret] = []
        files_scanned = 0

        for path in sorted(root.rglob("*")):
            if not path.is_file() or self._should_skip_path(root, path):
                continue

            metadata = SecretMetadata(
                file=path.relative_to(root).as_posix(),
                commit=commit,
                author=author,
                date=date,
            )
            secrets.extend(self.scan_file(path, metadata))
            files_scanned += 1

        self.logger.info(f"Secret scan complete: {len(secrets)} findings in {files_scanned} files")
        return secrets

    def _should_skip_path(self, root: Path, path: Path) -> bool:
        relative = path.relative_to(root)
        if any(part in self.skip_dirs for part in relative.parts[:-1]):
            return True

        if path.suffix.lower() in BINARY_EXTENSIONS:
            return True

        # Lock files are large and full of hashes
        if path.name.lower().endswith(LOCK_FILE_SUFFIXES):
            return True

        try:
            return path.stat().st_size > self.max_file_size
        except OSError:
            return True
