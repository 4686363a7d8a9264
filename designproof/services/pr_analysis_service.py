"""Pull request analysis orchestration."""

import asyncio
import logging
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from designproof import __version__
from designproof.config import Settings
from designproof.models.analysis import (
    AnalysisSummary,
    FileAnalysisResult,
    FileChange,
    FileStatus,
    PRAnalysisResult,
    PullRequestInfo,
)
from designproof.services.analysis_service import AnalysisService
from designproof.services.correlation_service import CorrelationService
from designproof.services.diff_analyzer import DiffAnalyzer
from designproof.services.github_service import FetchNotFound, FetchUnauthorized, GitHubService
from designproof.services.retry import RetryExhausted, RetryPolicy, Sleep

logger = logging.getLogger(__name__)


class AnalysisAborted(Exception):
    """A pull request analysis stopped before every file was processed."""

    def __init__(self, message: str, completed: int = 0):
        super().__init__(message)
        self.completed = completed


class PullRequestAnalyzer:
    """Analyzes the files a pull request changes and correlates findings with the diff."""

    def __init__(
        self,
        settings: Settings,
        github_service: GitHubService,
        analysis_service: Optional[AnalysisService] = None,
        diff_analyzer: Optional[DiffAnalyzer] = None,
        correlation_service: Optional[CorrelationService] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings
        self.github_service = github_service
        self.analysis_service = analysis_service or AnalysisService(settings)
        self.diff_analyzer = diff_analyzer or DiffAnalyzer()
        self.correlation_service = correlation_service or CorrelationService(
            tolerance=settings.changed_line_tolerance,
            report_only_changed=settings.report_only_changed,
        )
        self.retry_policy = retry_policy or RetryPolicy.from_config(settings.retry)
        self.sleep = sleep or asyncio.sleep

    async def analyze_by_url(self, url: str) -> PRAnalysisResult:
        parsed = GitHubService.parse_pr_url(url)
        if parsed is None:
            raise ValueError(f"Invalid PR URL: {url}")
        repo, pr_number = parsed
        return await self.analyze(repo, pr_number)

    async def analyze(self, repo: str, pr_number: int) -> PRAnalysisResult:
        """Analyze a pull request.

        Args:
            repo: Repository in "owner/name" format
            pr_number: Pull request number

        Returns:
            PRAnalysisResult with one FileAnalysisResult per analyzable file

        Raises:
            FetchNotFound: If the pull request does not exist
            AnalysisAborted: On authentication failure or exhausted retries
        """
        logger.info(f"Fetching PR #{pr_number} from {repo}")
        try:
            pr_info = await self.retry_policy.run(
                lambda: self.github_service.fetch_changed_files(repo, pr_number),
                sleep=self.sleep,
                description=f"PR #{pr_number} in {repo}",
            )
        except (FetchUnauthorized, RetryExhausted) as e:
            raise AnalysisAborted(str(e), completed=0) from e

        return await self.analyze_pull_request(pr_info)

    async def analyze_pull_request(self, pr_info: PullRequestInfo) -> PRAnalysisResult:
        files = pr_info.files_with_extensions(self.settings.file_extensions)
        logger.info(f"Found {len(files)} file(s) to analyze in PR #{pr_info.number}")

        file_results = await self.analyze_files(files)
        summary = AnalysisSummary.from_results(
            file_results,
            report_mode=self.settings.report_mode,
            high_severity_confidence=self.settings.high_severity_confidence,
        )
        return PRAnalysisResult(
            pr_info=pr_info,
            file_results=tuple(file_results),
            summary=summary,
            metadata={
                "analyzed_at": datetime.now(timezone.utc).isoformat(),
                "analyzer_version": __version__,
                "config": {
                    "report_only_changed": self.settings.report_only_changed,
                    "changed_line_tolerance": self.settings.changed_line_tolerance,
                    "min_confidence": self.settings.min_confidence,
                },
            },
        )

    async def analyze_files(self, file_changes: list[FileChange]) -> list[FileAnalysisResult]:
        """Analyze a change set file by file.

        Files are independent: a failing file is recorded with status
        ``error`` and the rest still run. Results keep input order.

        Raises:
            AnalysisAborted: On authentication failure or exhausted retries
        """
        if self.settings.temp_dir:
            Path(self.settings.temp_dir).mkdir(parents=True, exist_ok=True)
        temp_dir = Path(tempfile.mkdtemp(prefix="designproof-", dir=self.settings.temp_dir))
        try:
            if self.settings.max_concurrency > 1:
                return await self._analyze_concurrently(file_changes, temp_dir)

            results: list[FileAnalysisResult] = []
            for change in file_changes:
                try:
                    results.append(await self.analyze_file(change, temp_dir))
                except (FetchUnauthorized, RetryExhausted) as e:
                    raise AnalysisAborted(str(e), completed=len(results)) from e
            return results
        finally:
            if self.settings.cleanup_temp:
                shutil.rmtree(temp_dir, ignore_errors=True)
                logger.debug(f"Cleaned up {temp_dir}")

    async def _analyze_concurrently(
        self, file_changes: list[FileChange], temp_dir: Path
    ) -> list[FileAnalysisResult]:
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def run(change: FileChange) -> FileAnalysisResult:
            async with semaphore:
                return await self.analyze_file(change, temp_dir)

        outcomes = await asyncio.gather(
            *(run(change) for change in file_changes), return_exceptions=True
        )
        completed = sum(1 for o in outcomes if isinstance(o, FileAnalysisResult))
        for outcome in outcomes:
            if isinstance(outcome, (FetchUnauthorized, RetryExhausted)):
                raise AnalysisAborted(str(outcome), completed=completed) from outcome
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)

    async def analyze_file(self, change: FileChange, temp_dir: Path) -> FileAnalysisResult:
        """Analyze one changed file.

        Raises:
            FetchUnauthorized: Propagated so the whole run can abort
            RetryExhausted: Propagated so the whole run can abort
        """
        logger.info(f"Analyzing {change.filename}")
        diff = self.diff_analyzer.parse(change.patch, filename=change.filename)
        changes = self.diff_analyzer.analyze_changes(diff)

        if change.is_removed:
            logger.info(f"Skipped {change.filename}: file was removed")
            return FileAnalysisResult(
                filename=change.filename,
                status=FileStatus.REMOVED,
                diff=diff,
                changes=changes,
            )

        try:
            content = await self.retry_policy.run(
                lambda: self.github_service.download(change.raw_url),
                sleep=self.sleep,
                description=change.filename,
            )
            local_path = temp_dir / change.filename.replace("/", "_")
            local_path.write_bytes(content)

            violations = await self.analysis_service.analyze_path(
                local_path, filename=change.filename
            )
            correlated = self.correlation_service.correlate(violations, diff, changes)
        except (FetchUnauthorized, RetryExhausted):
            raise
        except FetchNotFound as e:
            logger.info(f"File {change.filename} is no longer available: {e}")
            return self._error_result(change, diff, changes, str(e))
        except Exception as e:
            logger.error(f"Failed to analyze {change.filename}: {e}")
            return self._error_result(change, diff, changes, str(e))

        return FileAnalysisResult(
            filename=change.filename,
            status=change.status,
            diff=diff,
            changes=changes,
            violations=tuple(correlated),
        )

    @staticmethod
    def _error_result(change, diff, changes, message: str) -> FileAnalysisResult:
        return FileAnalysisResult(
            filename=change.filename,
            status=FileStatus.ERROR,
            diff=diff,
            changes=changes,
            error=message,
        )
