"""Object-oriented design principle checks for Python code and pull requests."""

__version__ = "1.0.0"


async def analyze_file(path, settings=None):
    """Analyze one Python file and return its validated violations."""
    from designproof.config import get_settings
    from designproof.services.analysis_service import AnalysisService

    service = AnalysisService(settings or get_settings())
    return await service.analyze_path(path)


async def analyze_pr(url, settings=None):
    """Analyze a GitHub pull request given its URL."""
    from designproof.config import get_settings
    from designproof.services.github_service import GitHubService
    from designproof.services.llm_service import LLMService
    from designproof.services.analysis_service import AnalysisService
    from designproof.services.pr_analysis_service import PullRequestAnalyzer
    from designproof.services.validation_service import build_validation_service

    settings = settings or get_settings()
    judge = LLMService(settings) if settings.llm_enabled else None
    analysis_service = AnalysisService(
        settings, validation_service=build_validation_service(settings, judge)
    )
    analyzer = PullRequestAnalyzer(
        settings, GitHubService(settings), analysis_service=analysis_service
    )
    return await analyzer.analyze_by_url(url)
