from __future__ import annotations

import logging
from datetime import date

from infra.config import LedgerSettings, get_settings
from siteledger.interfaces import LedgerSourceRepository, RawLedgerSources
from siteledger.services.ledger.aggregator import aggregate
from siteledger.services.ledger.helpers import validate_range
from siteledger.services.ledger.models import ProjectLedgerSummary
from siteledger.services.ledger.normalizer import normalize_sources

logger = logging.getLogger(__name__)


class LedgerService:
    """Project cash statements read from a raw-row source."""

    def __init__(
        self,
        *,
        source_repo: LedgerSourceRepository,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._source_repo: LedgerSourceRepository = source_repo
        self._settings = settings or get_settings()

    def get_project_ledger(
        self,
        project_id: str,
        range_start: date,
        range_end: date,
    ) -> ProjectLedgerSummary:
        validate_range(range_start, range_end)
        sources = RawLedgerSources.load(self._source_repo, project_id)
        entries, diagnostics = normalize_sources(sources, project_id, settings=self._settings)
        summary = aggregate(entries, project_id, range_start, range_end, diagnostics=diagnostics)
        if diagnostics.issue_count:
            logger.info(
                "Project %s ledger built with %s data issues (%s warnings)",
                project_id,
                diagnostics.issue_count,
                len(diagnostics.warnings),
            )
        return summary


__all__ = ["LedgerService"]
