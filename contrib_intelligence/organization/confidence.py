#!/usr/bin/env python3
"""
Confidence Assignment
Signal confidence is a function of the source alone
"""

from .types import Confidence, SignalSource

SOURCE_CONFIDENCE = {
    SignalSource.COMPANY: Confidence.HIGH,
    SignalSource.ORG: Confidence.HIGH,
    SignalSource.EMAIL: Confidence.MEDIUM,
}


def assign_confidence(source: SignalSource) -> Confidence:
    return SOURCE_CONFIDENCE.get(source, Confidence.LOW)


def higher_confidence(a: Confidence, b: Confidence) -> Confidence:
    return a if a.value >= b.value else b
