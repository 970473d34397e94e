"""Central orchestrator for Export Analyzer processing."""

import json
import logging
import time
from pathlib import PurePath
from typing import Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .config import SKIP_FILE_NAMES
from .conversation_service import ConversationService
from .data_models import AnalysisResult, ExportBundle, Stats
from .engagement_analytics import compute_extras_analytics
from .format_classifier import SchemaTag
from .messaging_analytics import compute_analytics
from .phrase_counters import DEFAULT_PHRASE_COUNTERS, PhraseCounter
from .record_normalizer import classify_and_normalize
from .security_analytics import compute_security_analytics


logger = logging.getLogger(__name__)


class ExportAnalyzerError(Exception):
    """Base class for errors raised by an analysis run."""


class NoValidDataError(ExportAnalyzerError, ValueError):
    """No conversation threads survived normalization and merging."""

    def __init__(self, message: str = "No valid DM JSON files found."):
        super().__init__(message)


class Processor:
    """Main orchestrator for turning export documents into one analysis result."""

    def __init__(self, tz=None, phrase_counters: Sequence[PhraseCounter] = DEFAULT_PHRASE_COUNTERS):
        """Initialize the processor with configuration."""
        self.tz = tz
        self.phrase_counters = tuple(phrase_counters)
        self.conversation_service = ConversationService()

        # State variables - rebuilt on every run
        self.stats = Stats()
        self.bundle: Optional[ExportBundle] = None

    def run(self, documents: Iterable[Tuple[str, str]]) -> AnalysisResult:
        """
        Execute the complete analysis workflow.

        Args:
            documents: (file name, raw JSON text) pairs

        Returns:
            AnalysisResult with canonical records, the three reports and run stats

        Raises:
            NoValidDataError: If no conversation thread was found
        """
        start_time = time.time()
        self.stats = Stats()
        self.bundle = None

        logger.info("=" * 60)
        logger.info("    EXPORT ANALYZER - STARTING")
        logger.info("=" * 60)

        bundle = self._load_documents(documents)
        bundle.threads = self._merge_threads(bundle.threads)
        messaging, extras, security = self._analyze(bundle)

        self.bundle = bundle
        self._print_summary(time.time() - start_time)
        return AnalysisResult(bundle=bundle, messaging=messaging, extras=extras,
                              security=security, stats=self.stats)

    def _load_documents(self, documents: Iterable[Tuple[str, str]]) -> ExportBundle:
        """Parse, classify and normalize every document."""
        phase_start = time.time()
        logger.info("=" * 60)
        logger.info("PHASE: CLASSIFICATION AND NORMALIZATION")
        logger.info("=" * 60)

        bundle = ExportBundle()
        for name, text in tqdm(documents, desc="Classifying documents", unit="docs"):
            self.stats.documents_seen += 1
            if PurePath(name).name in SKIP_FILE_NAMES:
                logger.debug(f"Skipping {name}")
                self.stats.skipped += 1
                continue

            try:
                doc = json.loads(text)
            except (ValueError, RecursionError) as e:
                logger.warning(f"Could not parse {name}: {e}")
                self.stats.parse_errors += 1
                continue

            tag, records = classify_and_normalize(doc)
            if tag is SchemaTag.UNKNOWN:
                logger.debug(f"Unrecognized document shape: {name}")
                self.stats.unrecognized += 1
                continue

            self.stats.schema_counts[tag.value] = self.stats.schema_counts.get(tag.value, 0) + 1
            bundle.extend(records)

        recognized = sum(self.stats.schema_counts.values())
        logger.info(f"Recognized {recognized} of {self.stats.documents_seen} documents")
        self.stats.phase_times['classification'] = time.time() - phase_start
        return bundle

    def _merge_threads(self, fragments: List) -> List:
        """Merge thread fragments spread over several files."""
        phase_start = time.time()
        logger.info("=" * 60)
        logger.info("PHASE: CONVERSATION MERGING")
        logger.info("=" * 60)

        self.stats.threads_before_merge = len(fragments)
        threads = self.conversation_service.merge_threads(fragments)
        self.stats.threads_after_merge = len(threads)

        if not threads:
            raise NoValidDataError()

        self.stats.phase_times['merging'] = time.time() - phase_start
        return threads

    def _analyze(self, bundle: ExportBundle):
        """Run the three independent aggregators."""
        phase_start = time.time()
        logger.info("=" * 60)
        logger.info("PHASE: ANALYTICS")
        logger.info("=" * 60)

        messaging = compute_analytics(bundle.threads, tz=self.tz, phrase_counters=self.phrase_counters)
        extras = compute_extras_analytics(bundle)
        security = compute_security_analytics(bundle)

        self.stats.phase_times['analytics'] = time.time() - phase_start
        return messaging, extras, security

    def _print_summary(self, total_time: float) -> None:
        """Print final processing summary."""
        logger.info("=" * 60)
        logger.info("         ANALYSIS COMPLETE - SUMMARY")
        logger.info("=" * 60)

        logger.info(f"Documents seen:                      {self.stats.documents_seen}")
        logger.info(f"  - Skipped:                         {self.stats.skipped}")
        logger.info(f"  - Parse errors:                    {self.stats.parse_errors}")
        logger.info(f"  - Unrecognized:                    {self.stats.unrecognized}")

        logger.info("")
        logger.info("Recognized Schemas:")
        for schema, count in sorted(self.stats.schema_counts.items()):
            logger.info(f"  - {schema:<33} {count}")

        logger.info("")
        logger.info(f"Thread fragments:                    {self.stats.threads_before_merge}")
        logger.info(f"Merged conversations:                {self.stats.threads_after_merge}")

        logger.info("")
        logger.info("Processing Time:")
        for phase, duration in self.stats.phase_times.items():
            logger.info(f"  - {phase.replace('_', ' ').title():<30} {duration:.1f}s")
        logger.info(f"  - {'Total':<30} {total_time:.1f}s")
        logger.info("=" * 60)


def analyze_documents(documents: Iterable[Tuple[str, str]], tz=None,
                      phrase_counters: Sequence[PhraseCounter] = DEFAULT_PHRASE_COUNTERS) -> AnalysisResult:
    """Module-level shortcut for Processor.run."""
    return Processor(tz=tz, phrase_counters=phrase_counters).run(documents)
