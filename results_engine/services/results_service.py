"""
Results Service - Assessment Results Engine
results_engine/services/results_service.py

Persistence boundary around the pure ResultsAssembler:
fetch inputs → assemble → append snapshot → cache.

At most one computation per assessment id runs at a time; different
assessments compute in parallel.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

import redis

from results_engine.models.results import ComputedAssessmentResults
from results_engine.scoring.results_assembler import ResultsAssembler
from results_engine.services.cache import get_cache, results_key, results_ttl
from results_engine.services.data_source import ResultsDataSource
from results_engine.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class _AssessmentLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class ResultsService:
    """Compute, store and serve assessment results snapshots."""

    def __init__(
        self,
        data_source: ResultsDataSource,
        assembler: Optional[ResultsAssembler] = None,
        cache=_UNSET,
    ):
        self.data_source = data_source
        self.assembler = assembler or ResultsAssembler.from_settings()
        # None disables caching; the default resolves the shared Redis singleton lazily
        self._cache = cache
        # Entries live only while some thread holds or waits on them
        self._locks: Dict[str, _AssessmentLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def cache(self) -> Optional[RedisCache]:
        if self._cache is _UNSET:
            return get_cache()
        return self._cache

    @contextmanager
    def _assessment_lock(self, assessment_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(assessment_id)
            if entry is None:
                entry = self._locks[assessment_id] = _AssessmentLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[assessment_id]

    def compute(self, assessment_id: str) -> ComputedAssessmentResults:
        """
        Compute and append a new results snapshot.

        Raises:
            EntityNotFoundException: unknown assessment or template.
            DataSourceException: the data source failed.
            IncompleteDataError / ScoreValidationError / TemplateReferenceError:
                from the assembler; nothing is stored or cached.
        """
        with self._assessment_lock(assessment_id):
            return self._compute_locked(assessment_id)

    def get_results(self, assessment_id: str) -> ComputedAssessmentResults:
        """Cached snapshot, else the latest stored snapshot, else a fresh computation."""
        cached = self._cached_results(assessment_id)
        if cached is not None:
            return cached

        # Re-checked under the lock so concurrent first reads compute once
        with self._assessment_lock(assessment_id):
            stored = self.data_source.fetch_latest_results(assessment_id)
            if stored is not None:
                self._cache_results(stored)
                return stored
            return self._compute_locked(assessment_id)

    def _compute_locked(self, assessment_id: str) -> ComputedAssessmentResults:
        record = self.data_source.fetch_assessment(assessment_id)
        template = self.data_source.fetch_template(record.template_id)
        invitations = self.data_source.fetch_completed_invitations(assessment_id)
        totals = self.data_source.fetch_invitation_totals(assessment_id)
        family_id = record.template_family_id or template.family_id

        def previous_lookup(before):
            return self.data_source.fetch_previous_completed_results(
                record.subject_id, family_id, before, exclude_assessment_id=record.id,
            )

        logger.info(
            f"Computing results for assessment {assessment_id} "
            f"({len(invitations)} completed invitations)"
        )
        results = self.assembler.assemble(
            record,
            template,
            invitations,
            invitation_totals=totals,
            previous_lookup=previous_lookup,
        )

        # Drop the superseded entry first so a failed write never serves it again
        self._invalidate_cached(assessment_id)
        self.data_source.append_results(record, results)
        self._cache_results(results)
        return results

    def _cached_results(self, assessment_id: str) -> Optional[ComputedAssessmentResults]:
        cache = self.cache
        if not cache:
            return None
        key = results_key(assessment_id)
        try:
            cached = cache.get(key, ComputedAssessmentResults)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if cached:
            logger.debug(f"Cache hit for {key}")
        return cached

    def _invalidate_cached(self, assessment_id: str) -> None:
        cache = self.cache
        if not cache:
            return
        key = results_key(assessment_id)
        try:
            cache.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Cache invalidation failed for {key}: {e}")

    def _cache_results(self, results: ComputedAssessmentResults) -> None:
        cache = self.cache
        if not cache:
            return
        key = results_key(results.assessment_id)
        try:
            cache.set(key, results, results_ttl())
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
