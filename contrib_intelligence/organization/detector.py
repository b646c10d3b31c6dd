#!/usr/bin/env python3
"""
Organization Detector
Combines company field, org memberships and email domains into ranked affiliations
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from ..collectors.types import ContributorActivity, UserProfile
from .confidence import assign_confidence, higher_confidence
from .email_parser import extract_org_from_email
from .normalizer import normalize_company_field, resolve_alias
from .org_map import CaseInsensitiveOrgMap
from .types import (
    Confidence,
    DetectionResult,
    OrganizationAffiliation,
    OrganizationSignal,
    SignalSource,
)

logger = logging.getLogger(__name__)


class OrganizationDetector:
    """Detects organization affiliations for contributors

    All signals are gathered before any are merged, so the result does not
    depend on which source happens to be read first.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def _log(self, message: str) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, message)

    def collect_signals(self, profile: UserProfile, emails: Iterable[str]) -> List[OrganizationSignal]:
        signals: List[OrganizationSignal] = []

        if profile.company:
            normalized = normalize_company_field(profile.company)
            if normalized:
                signals.append(self._signal(resolve_alias(normalized), SignalSource.COMPANY))

        for org in profile.orgs:
            signals.append(self._signal(resolve_alias(org), SignalSource.ORG))

        for email in sorted(emails):
            org = extract_org_from_email(email)
            if org:
                signals.append(self._signal(resolve_alias(org), SignalSource.EMAIL))

        return signals

    def _signal(self, name: str, source: SignalSource) -> OrganizationSignal:
        confidence = assign_confidence(source)
        self._log(f"  {source.value} signal: {name} ({confidence.name})")
        return OrganizationSignal(name=name, source=source, confidence=confidence)

    def detect_for_contributor(self, profile: UserProfile, emails: Iterable[str] = ()) -> DetectionResult:
        """Ranked, deduplicated affiliations for one contributor"""
        self._log(f"Detecting organizations for {profile.username}")
        signals = self.collect_signals(profile, emails)

        merged: CaseInsensitiveOrgMap[OrganizationAffiliation] = CaseInsensitiveOrgMap()
        for signal in signals:
            existing = merged.get(signal.name)
            if existing is None:
                merged.set(signal.name, OrganizationAffiliation(
                    name=signal.name,
                    confidence=signal.confidence,
                    sources=[signal.source],
                ))
                continue

            existing.confidence = higher_confidence(existing.confidence, signal.confidence)
            if signal.source not in existing.sources:
                existing.sources.append(signal.source)
            # The company field carries the casing the person chose
            if signal.source is SignalSource.COMPANY:
                existing.name = signal.name

        affiliations = [affiliation for _, affiliation in merged.items()]
        affiliations.sort(key=lambda a: (-a.confidence.value, a.name.lower(), a.name))

        primary_org = self.pick_primary(affiliations)
        self._log(f"  Found {len(affiliations)} affiliations, primary: {primary_org or 'none'}")

        return DetectionResult(affiliations=affiliations, primary_org=primary_org)

    @staticmethod
    def pick_primary(affiliations: List[OrganizationAffiliation]) -> Optional[str]:
        """Company-sourced first, then the first HIGH, then whatever ranks first"""
        if not affiliations:
            return None
        for affiliation in affiliations:
            if SignalSource.COMPANY in affiliation.sources:
                return affiliation.name
        for affiliation in affiliations:
            if affiliation.confidence is Confidence.HIGH:
                return affiliation.name
        return affiliations[0].name

    def detect_for_contributors(self, profiles: Mapping[str, UserProfile],
                                activity_map: Mapping[str, ContributorActivity]) -> Dict[str, DetectionResult]:
        """Detection for every profile, using emails from the matching activity record"""
        results = {}
        for username, profile in profiles.items():
            activity = activity_map.get(username)
            emails = activity.emails if activity is not None else set()
            results[username] = self.detect_for_contributor(profile, emails)
        return results
