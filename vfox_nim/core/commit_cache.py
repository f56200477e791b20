"""
Version to (commit hash, commit date) lookups with a persistent cache.

Finding the nightly build that matches a stable release needs the commit
the release tag points at and the date of that commit. Both are immutable
upstream, so a cached entry is permanent truth: there is no invalidation.

Cache format (append-only text, one record per line, first match wins):

    2.2.4 f7145dd26efeeeb6eeae6fff649db244d81b212d 2025-04-22

Appends are serialized with a FileLock next to the cache file so parallel
installs of different versions cannot interleave partial lines.
"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from vfox_nim.core.exceptions import CommandError
from vfox_nim.core.executor import CommandExecutor
from vfox_nim.core.http import HttpClient

logger = logging.getLogger(__name__)

NIM_GIT_URL = "https://github.com/nim-lang/Nim.git"
NIM_COMMITS_API = "https://api.github.com/repos/nim-lang/Nim/commits"
CACHE_FILE_NAME = "version-commits.txt"


def get_default_cache_dir() -> Path:
    """
    Get the cache directory used by the plugin.

    Returns:
        ~/.cache/vfox-nim (HOME is honoured on every platform)
    """
    return Path.home() / ".cache" / "vfox-nim"


@dataclass(frozen=True)
class CommitInfo:
    """Commit a release tag points at."""

    version: str
    commit_hash: str
    commit_date: date

    def to_line(self) -> str:
        return f"{self.version} {self.commit_hash} {self.commit_date.isoformat()}\n"


class CommitCache:
    """
    Append-only flat-file cache of CommitInfo records.

    Example:
        >>> cache = CommitCache(Path("/tmp/version-commits.txt"))
        >>> cache.store("2.2.4", "f7145dd", date(2025, 4, 22))
        >>> cache.lookup("2.2.4").commit_hash
        'f7145dd'
    """

    def __init__(self, cache_file: Optional[Path] = None, lock_timeout: int = 30):
        """
        Initialize cache.

        Args:
            cache_file: Path to the cache file (default: ~/.cache/vfox-nim/version-commits.txt)
            lock_timeout: Seconds to wait for the append lock
        """
        if cache_file is None:
            cache_file = get_default_cache_dir() / CACHE_FILE_NAME

        self.cache_file = Path(cache_file)
        self.lock_path = self.cache_file.with_name(self.cache_file.name + ".lock")
        self.lock_timeout = lock_timeout

    def lookup(self, version: str) -> Optional[CommitInfo]:
        """
        Find the first record for a version.

        Args:
            version: Stable version string (e.g. '2.2.4')

        Returns:
            CommitInfo, or None if absent or the file is unreadable
        """
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                for line in f:
                    parts = line.split()
                    if len(parts) < 3 or parts[0] != version:
                        continue
                    try:
                        commit_date = date.fromisoformat(parts[2])
                    except ValueError:
                        logger.debug(f"Skipping malformed cache line: {line!r}")
                        continue
                    return CommitInfo(version, parts[1], commit_date)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read commit cache {self.cache_file}: {e}")
            return None

        return None

    def store(self, version: str, commit_hash: str, commit_date: date) -> None:
        """
        Append a record. Existing lines are never rewritten or deduplicated.

        Failures are logged; the cache is an optimization only.
        """
        info = CommitInfo(version, commit_hash, commit_date)
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(self.lock_path, timeout=self.lock_timeout):
                with open(self.cache_file, "a", encoding="utf-8") as f:
                    f.write(info.to_line())
            logger.debug(f"Cached commit info for {version}: {commit_hash}")
        except Timeout:
            logger.warning(
                f"Could not acquire commit cache lock after {self.lock_timeout}s, "
                f"not caching {version}"
            )
        except OSError as e:
            logger.warning(f"Could not write commit cache {self.cache_file}: {e}")


class CommitResolver:
    """
    Resolves a stable version to its CommitInfo, cache first.

    On a cache miss, asks git for the commit behind tag v{version}, then the
    GitHub commit API for that commit's date. Either step failing yields
    None, which callers treat as "exact nightly unavailable".
    """

    def __init__(
        self,
        cache: CommitCache,
        http: HttpClient,
        executor: Optional[CommandExecutor] = None,
        git_url: str = NIM_GIT_URL,
        commits_api: str = NIM_COMMITS_API,
    ):
        self.cache = cache
        self.http = http
        self.executor = executor or CommandExecutor()
        self.git_url = git_url
        self.commits_api = commits_api

    def resolve(self, version: str) -> Optional[CommitInfo]:
        """
        Get commit hash and date for a stable version.

        Args:
            version: Stable version string (e.g. '2.2.4')

        Returns:
            CommitInfo, or None if it cannot be determined
        """
        cached = self.cache.lookup(version)
        if cached:
            logger.debug(f"Commit cache hit for {version}: {cached.commit_hash}")
            return cached

        commit_hash = self.find_tag_commit(version)
        if not commit_hash:
            logger.info(f"Could not find a commit for tag v{version}")
            return None

        commit_date = self.find_commit_date(commit_hash)
        if not commit_date:
            logger.info(f"Could not determine the date of commit {commit_hash}")
            return None

        self.cache.store(version, commit_hash, commit_date)
        return CommitInfo(version, commit_hash, commit_date)

    def find_tag_commit(self, version: str) -> Optional[str]:
        """
        Resolve tag v{version} to a commit hash via git ls-remote.

        The peeled ref (annotated tags) is tried first, then the plain ref
        (lightweight tags).
        """
        tag_ref = f"refs/tags/v{version}"
        for ref in (f"{tag_ref}^{{}}", tag_ref):
            try:
                result = self.executor.run(["git", "ls-remote", "--tags", self.git_url, ref])
            except CommandError as e:
                logger.warning(f"git ls-remote failed: {e}")
                return None

            if not result.ok:
                logger.debug(f"git ls-remote {ref} exited with {result.returncode}")
                continue

            fields = result.stdout.split()
            if fields:
                return fields[0]

        return None

    def find_commit_date(self, commit_hash: str) -> Optional[date]:
        """Resolve a commit hash to its committer date via the GitHub API."""
        data = self.http.get_json(f"{self.commits_api}/{commit_hash}")
        if not isinstance(data, dict):
            return None

        raw = ((data.get("commit") or {}).get("committer") or {}).get("date")
        if not isinstance(raw, str):
            return None

        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            logger.warning(f"Unexpected commit date format: {raw!r}")
            return None


__all__ = [
    "CommitInfo",
    "CommitCache",
    "CommitResolver",
    "get_default_cache_dir",
    "NIM_GIT_URL",
    "NIM_COMMITS_API",
    "CACHE_FILE_NAME",
]
