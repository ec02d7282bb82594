import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

from contractguard.aggregation.aggregator import aggregate
from contractguard.analysis.exceptions import AnalysisError, InvalidInputError
from contractguard.analysis.models import (
    AnalysisResult,
    AnalysisStatus,
    Finding,
    Severity,
    sort_by_severity,
)
from contractguard.config.settings import Settings
from contractguard.database.repositories.base import BaseAnalysisRepository
from contractguard.database.repositories.factory import AnalysisRepositoryFactory
from contractguard.logging.logger import Log
from contractguard.patterns.catalog import load_catalog
from contractguard.patterns.matcher import PatternMatcher
from contractguard.scoring.scorer import score_findings, summarize
from contractguard.semantic.base import BaseSemanticAnalyzer
from contractguard.semantic.exceptions import ExternalAnalyzerError, ExternalAnalyzerTimeoutError
from contractguard.semantic.factory import SemanticAnalyzerFactory

INTERNAL_ERROR_MESSAGE = "Internal error during analysis"


class AnalysisOrchestrator:
    """Coordinates one analysis attempt per document.

    Attempt: match patterns and call the semantic analyzer concurrently ->
    aggregate -> score -> persist findings, severity and COMPLETED together.
    Any failure moves the document to FAILED and nothing from the attempt is
    persisted. Starting an attempt is guarded by the repository's atomic claim,
    so at most one attempt per document is ever in flight.
    """

    def __init__(
        self,
        *,
        matcher: PatternMatcher,
        semantic_analyzer: BaseSemanticAnalyzer,
        repository: BaseAnalysisRepository,
        max_concurrent_attempts: int = 4,
        semantic_timeout_seconds: float = 90,
        allow_partial_results: bool = False,
    ) -> None:
        self._matcher = matcher
        self._semantic_analyzer = semantic_analyzer
        self._repository = repository
        self._semantic_timeout_seconds = semantic_timeout_seconds
        self._allow_partial_results = allow_partial_results
        self._attempt_executor = ThreadPoolExecutor(
            max_workers=max_concurrent_attempts,
            thread_name_prefix="analysis-attempt",
        )

    @property
    def repository(self) -> BaseAnalysisRepository:
        return self._repository

    def start_analysis(
        self,
        document_id: int,
        text: str,
        *,
        reanalyze: bool = False,
    ) -> "Future[AnalysisStatus]":
        """Claim the document and run the attempt in the background.

        Returns immediately. The returned future resolves to the final status;
        callers may ignore it and poll ``get_status`` instead.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            AlreadyInProgressError: if an attempt is already running.
            AlreadyCompletedError: if completed and ``reanalyze`` is False.
        """
        self._repository.claim_for_analysis(document_id, reanalyze=reanalyze)
        Log.info("Analysis dispatched", document_id=document_id)
        try:
            return self._attempt_executor.submit(self.execute_claimed, document_id, text)
        except RuntimeError:
            self._repository.mark_failed(document_id, "Analysis service is shutting down")
            raise

    def analyze(self, document_id: int, text: str, *, reanalyze: bool = False) -> AnalysisStatus:
        """Claim the document and run the attempt in the calling thread."""
        self._repository.claim_for_analysis(document_id, reanalyze=reanalyze)
        return self.execute_claimed(document_id, text)

    def execute_claimed(self, document_id: int, text: str) -> AnalysisStatus:
        """Run an attempt for a document that is already IN_PROGRESS.

        Errors are recorded on the document, never raised.
        """
        Log.info("Starting analysis", document_id=document_id)
        try:
            result = self._run_attempt(document_id, text)
            self._repository.replace_analysis_result(result)
        except AnalysisError as exc:
            Log.error(f"Analysis failed: {exc}", document_id=document_id)
            self._fail(document_id, str(exc))
        except Exception:
            Log.exception("Unexpected error during analysis", document_id=document_id)
            self._fail(document_id, INTERNAL_ERROR_MESSAGE)
        else:
            summary = summarize(result.findings)
            Log.info(
                f"Analysis completed. Risk score: {result.overall_severity.value}, "
                f"Findings: {summary.total} "
                f"(high={summary.by_severity[Severity.HIGH]}, "
                f"medium={summary.by_severity[Severity.MEDIUM]}, "
                f"low={summary.by_severity[Severity.LOW]})",
                document_id=document_id,
            )
        return self._repository.get_status(document_id)

    def get_status(self, document_id: int) -> AnalysisStatus:
        return self._repository.get_status(document_id)

    def get_results(self, document_id: int) -> AnalysisResult | None:
        return self._repository.get_result(document_id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting attempts and release the attempt executor."""
        self._attempt_executor.shutdown(wait=wait)

    def _run_attempt(self, document_id: int, text: str) -> AnalysisResult:
        if not text or not text.strip():
            raise InvalidInputError("Contract has no extracted text to analyze")

        semantic_future = self._start_semantic_call(document_id, text)
        pattern_findings = self._matcher.analyze(text)
        Log.info(f"Pattern analysis found {len(pattern_findings)} risks", document_id=document_id)

        semantic_findings = self._await_semantic(document_id, semantic_future)
        degraded = semantic_findings is None

        findings = sort_by_severity(aggregate(pattern_findings, semantic_findings or []))
        return AnalysisResult(
            document_id=document_id,
            overall_severity=score_findings(findings),
            findings=tuple(findings),
            completed=True,
            degraded=degraded,
        )

    def _start_semantic_call(self, document_id: int, text: str) -> "Future[list[Finding]]":
        """Run the semantic call on its own thread, started now.

        A provider call that outlives its timeout keeps only its own thread, so
        later attempts never queue behind it.
        """
        future: Future[list[Finding]] = Future()

        def _call() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._semantic_analyzer.analyze(text))
            except Exception as exc:
                future.set_exception(exc)

        threading.Thread(
            target=_call,
            name=f"semantic-analyzer-{document_id}",
            daemon=True,
        ).start()
        return future

    def _await_semantic(
        self,
        document_id: int,
        semantic_future: "Future[list[Finding]]",
    ) -> list[Finding] | None:
        """Semantic findings, or None when partial results are allowed and the call failed."""
        try:
            try:
                findings = semantic_future.result(timeout=self._semantic_timeout_seconds)
            except FutureTimeoutError as exc:
                raise ExternalAnalyzerTimeoutError(
                    f"no response within {self._semantic_timeout_seconds} seconds"
                ) from exc
        except ExternalAnalyzerError as exc:
            if not self._allow_partial_results:
                raise
            Log.warning(
                f"Semantic analysis failed, completing with pattern findings only: {exc}",
                document_id=document_id,
            )
            return None
        Log.info(f"Semantic analysis found {len(findings)} risks", document_id=document_id)
        return findings

    def _fail(self, document_id: int, reason: str) -> None:
        try:
            self._repository.mark_failed(document_id, reason)
        except Exception as exc:
            Log.error("Could not mark document as failed", document_id=document_id, error=exc)


def build_orchestrator(
    settings: Settings,
    repository: BaseAnalysisRepository | None = None,
) -> AnalysisOrchestrator:
    """Build an AnalysisOrchestrator with all required adapters."""
    catalog_path = Path(settings.pattern_catalog_path) if settings.pattern_catalog_path else None
    matcher = PatternMatcher(load_catalog(catalog_path))
    semantic_analyzer = SemanticAnalyzerFactory.create(settings)
    if repository is None:
        repository = AnalysisRepositoryFactory.create(settings)
    return AnalysisOrchestrator(
        matcher=matcher,
        semantic_analyzer=semantic_analyzer,
        repository=repository,
        max_concurrent_attempts=settings.analysis_max_concurrent_attempts,
        semantic_timeout_seconds=settings.semantic_call_timeout_seconds,
        allow_partial_results=settings.analysis_allow_partial_results,
    )
