"""GitHub service for fetching pull request changes and file content."""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx

from designproof.config import Settings
from designproof.models.analysis import FileChange, FileStatus, PullRequestInfo

logger = logging.getLogger(__name__)

PR_URL_RE = re.compile(r"github\.com/([\w.-]+/[\w.-]+)/pull/(\d+)")
PR_URL_SCAN_RE = re.compile(r"https?://github\.com/[\w.-]+/[\w.-]+/pull/\d+")


class FetchError(Exception):
    """A source-control request failed."""


class FetchNotFound(FetchError):
    """The requested pull request or file does not exist."""


class FetchUnauthorized(FetchError):
    """The token is missing, invalid, or lacks access."""


class FetchRateLimited(FetchError):
    """The API rate limit was hit."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class GitHubService:
    """Service for the GitHub REST operations a pull request analysis needs."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = settings.github_token
        self.api_url = settings.github_api_url.rstrip("/")
        self.per_page = settings.github_per_page
        self.timeout = settings.github_timeout
        self.transport = transport

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        headers = {"Accept": accept}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,
        )

    async def fetch_changed_files(self, repo: str, pr_number: int) -> PullRequestInfo:
        """Fetch a pull request and every file it changes.

        Args:
            repo: Repository in "owner/name" format
            pr_number: Pull request number

        Returns:
            PullRequestInfo with all file changes, across every page

        Raises:
            FetchNotFound: If the pull request does not exist
            FetchUnauthorized: If the token is rejected
            FetchRateLimited: If the rate limit is hit
        """
        async with self._client() as client:
            response = await client.get(
                f"{self.api_url}/repos/{repo}/pulls/{pr_number}",
                headers=self._headers(),
            )
            self._check(response, f"PR #{pr_number} in {repo}")
            pr = response.json()

            files: list[dict[str, Any]] = []
            page = 1
            while True:
                response = await client.get(
                    f"{self.api_url}/repos/{repo}/pulls/{pr_number}/files",
                    headers=self._headers(),
                    params={"per_page": self.per_page, "page": page},
                )
                self._check(response, f"files of PR #{pr_number} in {repo}")
                batch = response.json()
                files.extend(batch)
                if len(batch) < self.per_page:
                    break
                page += 1

        logger.info(f"Fetched PR #{pr_number} in {repo}: {len(files)} changed file(s)")

        return PullRequestInfo(
            repo=repo,
            number=pr_number,
            title=pr.get("title") or "",
            description=pr.get("body"),
            author=(pr.get("user") or {}).get("login"),
            base_branch=(pr.get("base") or {}).get("ref"),
            head_branch=(pr.get("head") or {}).get("ref"),
            state=pr.get("state"),
            merged=bool(pr.get("merged")),
            url=pr.get("html_url"),
            file_changes=tuple(self._file_change(f) for f in files),
        )

    async def download(self, url: str) -> bytes:
        """Download raw file content.

        Args:
            url: Raw content URL of a changed file

        Returns:
            File content bytes
        """
        async with self._client() as client:
            response = await client.get(url, headers=self._headers(accept="*/*"))
            self._check(response, url)
            return response.content

    @staticmethod
    def _file_change(data: dict[str, Any]) -> FileChange:
        return FileChange(
            filename=data["filename"],
            status=FileStatus.from_github(data.get("status", "modified")),
            additions=data.get("additions", 0),
            deletions=data.get("deletions", 0),
            patch=data.get("patch"),
            raw_url=data.get("raw_url"),
            blob_url=data.get("blob_url"),
            sha=data.get("sha"),
        )

    @staticmethod
    def _check(response: httpx.Response, what: str) -> None:
        status = response.status_code
        if status == 404:
            raise FetchNotFound(f"Not found: {what}")
        if status == 429 or (
            status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            raise FetchRateLimited(
                f"GitHub API rate limit exceeded fetching {what}",
                retry_after=GitHubService._retry_after(response.headers),
            )
        if status in (401, 403):
            raise FetchUnauthorized(f"Invalid or missing GitHub token for {what}")
        response.raise_for_status()

    @staticmethod
    def _retry_after(headers: httpx.Headers, now: Optional[datetime] = None) -> Optional[float]:
        """
        Seconds to wait before retrying a rate-limited request.

        ``Retry-After`` may be a number of seconds or an HTTP-date. Primary
        rate limits only send ``X-RateLimit-Reset`` (epoch seconds), which
        is used when ``Retry-After`` is absent or unreadable.

        Returns:
            Non-negative seconds, or None when no header gives a wait
        """
        now = now or datetime.now(timezone.utc)

        value = (headers.get("retry-after") or "").strip()
        if value:
            try:
                return max(float(value), 0.0)
            except ValueError:
                pass
            try:
                when = parsedate_to_datetime(value)
            except (TypeError, ValueError):
                when = None
            if when is not None:
                if when.tzinfo is None:
                    when = when.replace(tzinfo=timezone.utc)
                return max((when - now).total_seconds(), 0.0)
            logger.warning(f"Ignoring unreadable Retry-After header: {value!r}")

        reset = (headers.get("x-ratelimit-reset") or "").strip()
        if reset:
            try:
                return max(float(reset) - now.timestamp(), 0.0)
            except ValueError:
                logger.warning(f"Ignoring unreadable X-RateLimit-Reset header: {reset!r}")
        return None

    @staticmethod
    def parse_pr_url(url: str) -> Optional[tuple[str, int]]:
        """Extract (repo, pr_number) from a pull request URL, or None."""
        match = PR_URL_RE.search(url)
        if not match:
            return None
        return match.group(1), int(match.group(2))

    @staticmethod
    def extract_pr_urls(text: Optional[str]) -> list[tuple[str, int]]:
        """Find every pull request URL in free text."""
        found = []
        for url in PR_URL_SCAN_RE.findall(text or ""):
            parsed = GitHubService.parse_pr_url(url)
            if parsed:
                found.append(parsed)
        return found
