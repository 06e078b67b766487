"""Application service deciding which repositories to archive and archiving them."""

import base64
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from repo_archiver.domain.errors import ErrorKind, GitHubAPIError
from repo_archiver.domain.repository import RepositoryRef
from repo_archiver.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "Add a note that this repository has been archived"
ARCHIVE_NOTICE = "This repository has been archived and is no longer maintained."
README_PATH = "README.md"
ALL_REPOSITORIES = "*"


class ArchiverService:
    """Service for annotating and archiving inactive repositories."""

    def __init__(
        self,
        github_client: GitHubRestClient,
        notice: Optional[str] = None,
        commit_message: str = COMMIT_MESSAGE,
        readme_path: str = README_PATH
    ):
        """
        Initialize archiver service.

        Args:
            github_client: GitHub API client
            notice: Text added to the README before archiving
            commit_message: Message of the README commit
            readme_path: Path of the README inside each repository
        """
        self.github_client = github_client
        self.notice = notice or ARCHIVE_NOTICE
        self.commit_message = commit_message
        self.readme_path = readme_path

    def archive(self, repo: RepositoryRef) -> bool:
        """
        Annotate the README of a repository if needed, then archive it.

        A missing README only skips the annotation. Any other error aborts
        this repository and is raised unchanged.

        Returns:
            True if the repository is now archived
        """
        logger.info(f"Processing {repo.full_name}")
        try:
            handle = self.github_client.get_file_handle(repo.owner, repo.name, self.readme_path)
        except GitHubAPIError as e:
            if e.kind is not ErrorKind.NOT_FOUND:
                raise
            logger.info(f"No {self.readme_path} in {repo.full_name}, skipping annotation")
            handle = None

        if handle is not None:
            encoded = self.github_client.download_blob(repo.owner, repo.name, handle.sha)
            raw = base64.b64decode(encoded)
            # Undecodable bytes only matter for the lookup; the commit keeps them as is
            if self.notice in raw.decode("utf-8", errors="replace"):
                logger.info(f"{repo.full_name} already carries the archive notice")
            else:
                self.github_client.update_file(
                    repo.owner,
                    repo.name,
                    handle,
                    self.notice.encode("utf-8") + b"\n\n" + raw,
                    self.commit_message
                )
                logger.info(f"Added archive notice to {repo.full_name}/{self.readme_path}")

        return self.github_client.archive_repository(repo.owner, repo.name)

    def find_inactive(
        self,
        org: str,
        max_inactive_days: float,
        repo_filter: str = ALL_REPOSITORIES,
        ignore: Iterable[str] = (),
        now: Optional[datetime] = None
    ) -> List[RepositoryRef]:
        """
        Select the repositories of an organization that should be archived.

        Args:
            org: Organization login
            max_inactive_days: Days without a push after which a repository is inactive
            repo_filter: A single repository name, or "*" for all of them
            ignore: Repository names never to archive
            now: Reference time, defaults to the current UTC time
        """
        ignored = set(ignore)
        candidates = []
        for repo in self.github_client.list_repositories(org):
            if repo_filter != ALL_REPOSITORIES and repo.name != repo_filter:
                continue
            if repo.name in ignored:
                logger.debug(f"Ignoring {repo.full_name}")
                continue
            if repo.archived:
                logger.debug(f"{repo.full_name} is already archived")
                continue
            if not repo.is_inactive(max_inactive_days, now):
                logger.debug(f"{repo.full_name} is still active")
                continue
            candidates.append(repo)

        logger.info(f"{len(candidates)} repositories in {org} inactive for more than {max_inactive_days} days")
        return candidates

    def archive_inactive(
        self,
        org: str,
        max_inactive_days: float,
        repo_filter: str = ALL_REPOSITORIES,
        ignore: Iterable[str] = (),
        now: Optional[datetime] = None
    ) -> Dict[str, bool]:
        """
        Archive every inactive repository, one at a time.

        The first error stops the run and propagates.

        Returns:
            Archived flag per repository name
        """
        results: Dict[str, bool] = {}
        for repo in self.find_inactive(org, max_inactive_days, repo_filter, ignore, now):
            results[repo.name] = self.archive(repo)

        logger.info(f"Archiving completed. {sum(results.values())}/{len(results)} repositories archived")
        return results
