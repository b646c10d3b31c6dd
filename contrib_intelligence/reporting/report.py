#!/usr/bin/env python3
"""
Attribution Report
Builds the organization report from one or more collection results and exports it
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Sequence

from ..analysis.aggregator import OrganizationReport, aggregate_by_organization, aggregate_multi_repo
from ..analysis.scorer import ContributorScore
from ..core.orchestrator import CollectionResult
from ..core.timezone_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass
class ReportData:
    organizations: List[OrganizationReport]
    unknown_contributors: List[ContributorScore]
    repos: List[str]
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            'generated_at': self.generated_at.isoformat(),
            'repos': list(self.repos),
            'organizations': [o.to_dict() for o in self.organizations],
            'unknown_contributors': [c.to_dict() for c in self.unknown_contributors],
        }


def generate_report(results: Sequence[CollectionResult], repos: Sequence[str]) -> ReportData:
    """Aggregate results by organization; several results are merged first"""
    if len(results) == 1:
        contributors = results[0].contributors
    else:
        labelled = [
            (repos[i] if i < len(repos) else f"repo-{i}", result.contributors)
            for i, result in enumerate(results)
        ]
        contributors = aggregate_multi_repo(labelled).contributors

    aggregation = aggregate_by_organization(contributors)
    return ReportData(
        organizations=aggregation.organizations,
        unknown_contributors=aggregation.unknown,
        repos=list(repos),
    )


def export_report_json(report: ReportData, path: str) -> Path:
    """Write the report as pretty-printed JSON, creating parent directories"""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, 'w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    logger.info(f"Report written to {out}")
    return out


def format_report_text(report: ReportData, max_unknown: int = 10) -> str:
    """Plain-text summary: ranked organizations, then the top unattributed contributors"""
    lines = [f"Repositories: {', '.join(report.repos) or '-'}", ""]

    if report.organizations:
        lines.append("Organizations")
        lines.append(f"  {'#':>3}  {'Organization':<30} {'Score':>8} {'People':>6}  Top contributors")
        for rank, org in enumerate(report.organizations, 1):
            lines.append(
                f"  {rank:>3}  {org.name[:30]:<30} {org.score:>8.2f} {org.contributor_count:>6}  "
                f"{', '.join(org.top_contributors)}"
            )
    else:
        lines.append("No organizations detected")

    if report.unknown_contributors:
        lines.append("")
        shown = report.unknown_contributors[:max_unknown]
        lines.append(f"Unattributed contributors ({len(report.unknown_contributors)}, top {len(shown)})")
        for c in shown:
            lines.append(f"  {c.username:<30} {c.score:>8.2f}")

    return '\n'.join(lines)
