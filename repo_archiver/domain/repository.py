"""Domain entities for GitHub repositories."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class RepositoryRef:
    """Immutable reference to a repository, with the listing metadata we act on."""
    
    owner: str
    name: str
    archived: bool = False
    pushed_at: Optional[datetime] = None
    
    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"
    
    def is_inactive(self, max_inactive_days: float, now: Optional[datetime] = None) -> bool:
        """
        Check whether the last push is older than the threshold.
        
        A repository that has never been pushed to counts as inactive.
        """
        if self.pushed_at is None:
            return True
        if now is None:
            now = datetime.now(timezone.utc)
        return now - self.pushed_at > timedelta(days=max_inactive_days)


@dataclass(frozen=True)
class FileHandle:
    """A file path paired with the blob SHA GitHub reports for it."""
    
    path: str
    sha: str
