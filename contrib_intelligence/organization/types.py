#!/usr/bin/env python3
"""
Organization Types
Signals, affiliations and detection results
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Confidence(Enum):
    """How trustworthy a signal source is"""
    HIGH = 3
    MEDIUM = 2
    LOW = 1

    @property
    def label(self) -> str:
        return self.name.lower()


class SignalSource(Enum):
    """Where an organization signal was found"""
    COMPANY = "company"
    ORG = "org"
    EMAIL = "email"


@dataclass
class OrganizationSignal:
    """One piece of raw evidence for an affiliation"""
    name: str
    source: SignalSource
    confidence: Confidence


@dataclass
class OrganizationAffiliation:
    """Deduplicated affiliation built from one or more signals"""
    name: str
    confidence: Confidence
    sources: List[SignalSource] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'confidence': self.confidence.label,
            'sources': [s.value for s in self.sources],
        }


@dataclass
class DetectionResult:
    """Ranked affiliations plus the primary organization, if any"""
    affiliations: List[OrganizationAffiliation] = field(default_factory=list)
    primary_org: Optional[str] = None
