"""End-to-end onboarding run.

Sequence for one repository:

1. Clone or open, then fetch/checkout/pull the requested branch
2. Analyze metadata, files at HEAD, commit history and hotspots
3. Build the repository context payload (and the git report)
4. Ensure a cached copy of the payload for this repository identity
5. Generate every document, writing each as soon as it is ready

Steps 1-3 make up ``analyze``; ``run`` adds steps 4 and 5.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from onboarder.analyzers.report import RepositoryAnalyzer
from onboarder.cache.context_cache import ContextCache
from onboarder.cache.identity import RepositoryIdentity
from onboarder.cache.store import CacheStore, GeminiCacheStore, InMemoryCacheStore
from onboarder.config import OnboarderConfig
from onboarder.context.builder import ContextSections, RepositoryContextBuilder
from onboarder.documents.pipeline import DocumentPipeline, PipelineContext
from onboarder.errors import OnboarderError
from onboarder.llm.client import create_client
from onboarder.llm.resilient import ResilientApiClient, RetryPolicy
from onboarder.models.documents import DocumentResult, write_document
from onboarder.models.report import RepositoryReport
from onboarder.renderers.git_report import write_git_report
from onboarder.utils.cancellation import CancelToken
from onboarder.vcs.repository import GitRepositoryManager

logger = logging.getLogger(__name__)

PAYLOAD_FILE = "REPOSITORY_CONTEXT_PAYLOAD.xml"


@dataclass(frozen=True)
class AnalysisOutput:
    """Result of the deterministic half of a run.

    Attributes:
        report: Immutable repository report
        sections: Rendered payload sections
        payload: Full repository context payload
        root: Local working tree the corpus was read from
    """

    report: RepositoryReport
    sections: ContextSections
    payload: str
    root: Path


class OnboardingRunner:
    """Runs analysis and document generation for one repository at a time.

    Usage:
        runner = OnboardingRunner(load_config())
        documents = runner.run("https://github.com/acme/widgets", branch="main")
    """

    def __init__(
        self,
        config: OnboarderConfig | None = None,
        cancel: CancelToken | None = None,
        manager: GitRepositoryManager | None = None,
        analyzer: RepositoryAnalyzer | None = None,
        api: ResilientApiClient | None = None,
        cache: ContextCache | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Configuration (defaults if None)
            cancel: Run-wide cancellation token (built from the retry
                timeout if None)
            manager: Repository manager (built from config if None)
            analyzer: Repository analyzer (built from config if None)
            api: Generation client (built lazily from config if None)
            cache: Context cache (built lazily from config if None)
        """
        self.config = config or OnboarderConfig()
        self.cancel = cancel or CancelToken(timeout=self.config.retry.timeout_seconds)
        self.manager = manager or GitRepositoryManager(self.config.git)
        self.analyzer = analyzer or RepositoryAnalyzer(self.config.analysis)
        self.builder = RepositoryContextBuilder()
        self._api = api
        self._cache = cache

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output.directory)

    @property
    def debug_dir(self) -> Path | None:
        if not self.config.output.debug:
            return None
        return Path(self.config.output.debug_directory)

    def analyze(
        self,
        repo_url: str,
        branch: str | None = None,
        include_tests: bool | None = None,
    ) -> AnalysisOutput:
        """Check out the repository and build its report and context payload.

        Writes the git report, plus the payload sections when
        ``output.write_payloads`` is set.

        Raises:
            OnboarderError: REPO_ACCESS or ANALYSIS on failure
        """
        if include_tests is None:
            include_tests = self.config.documents.include_tests

        with self.manager.open(repo_url) as session:
            active = session.fetch_checkout_pull(branch)
            logger.info("Checked out %s", active or "detached HEAD")

            report = self.analyzer.analyze(session, include_tests=include_tests)
            sections = self.builder.sections(report, session.root)
            payload = self.builder.build(report, session.root, sections)
            root = session.root

        write_git_report(
            report,
            self.output_dir / self.config.output.git_report,
            max_files=self.config.analysis.max_report_files,
        )
        if self.config.output.write_payloads:
            self._write_payloads(sections, payload)

        return AnalysisOutput(report=report, sections=sections, payload=payload, root=root)

    def run(
        self,
        repo_url: str,
        branch: str | None = None,
        include_tests: bool | None = None,
        target_language: str | None = None,
    ) -> DocumentResult:
        """Analyze the repository and generate all onboarding documents.

        Each document is written to the output directory as soon as it is
        generated, so a later fatal error keeps the earlier documents.

        Args:
            repo_url: Repository URL or local path
            branch: Branch to check out (remote default if None)
            include_tests: Keep test files (config default if None)
            target_language: Response language (config default if None)

        Returns:
            Generated documents in stage order

        Raises:
            OnboarderError: On the first fatal failure
            ValueError: If generation is disabled in config
        """
        language = target_language or self.config.documents.target_language
        analysis = self.analyze(repo_url, branch, include_tests)
        api = self._get_api()

        identity = RepositoryIdentity.from_url(repo_url)
        cache_name = self._get_cache().ensure(
            identity, analysis.payload, self.config.llm.model, self.cancel
        )
        if cache_name is None:
            logger.info("No cached context for %s; embedding the full payload", identity)

        pipeline = DocumentPipeline(
            api,
            debug_dir=self.debug_dir,
            max_tokens=self.config.llm.max_tokens,
        )
        context = PipelineContext(
            report=analysis.report,
            payload=analysis.payload,
            cache_name=cache_name,
            target_language=language,
        )
        result = pipeline.run(
            context,
            validate=self.config.documents.judge,
            on_document=self._write_document,
        )
        logger.info("Wrote %d documents to %s", len(result), self.output_dir)
        return result

    def _write_document(self, document_type: str, content: str) -> None:
        path = write_document(self.output_dir, document_type, content)
        if path is None:
            logger.warning("%s is empty, not written", document_type)
        else:
            logger.info("Wrote %s", path)

    def _write_payloads(self, sections: ContextSections, payload: str) -> None:
        target = Path(self.config.output.debug_directory)
        target.mkdir(parents=True, exist_ok=True)
        files = {**sections.as_files(), PAYLOAD_FILE: payload}
        for name, content in files.items():
            (target / name).write_text(content, encoding="utf-8")
        logger.info("Wrote %d payload files to %s", len(files), target)

    def _get_api(self) -> ResilientApiClient:
        if self._api is None:
            self._api = ResilientApiClient(
                create_client(self.config.llm),
                RetryPolicy.from_config(self.config.retry),
                cancel=self.cancel,
            )
        return self._api

    def _get_cache(self) -> ContextCache:
        if self._cache is None:
            self._cache = ContextCache(self._build_store(), self.config.cache)
        return self._cache

    def _build_store(self) -> CacheStore | None:
        cache_config = self.config.cache
        if not cache_config.enabled:
            logger.info("Context cache disabled in configuration")
            return None
        if cache_config.backend == "memory":
            return InMemoryCacheStore()
        if not self.config.llm.supports_context_cache:
            logger.info(
                "Provider %s does not support cached context; using full payload",
                self.config.llm.provider,
            )
            return None
        try:
            return GeminiCacheStore(self.config.llm.api_key)
        except OnboarderError as e:
            logger.warning("Context cache unavailable: %s", e.message)
            return None
