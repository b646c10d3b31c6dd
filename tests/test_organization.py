"""
Organization detection: normalization, email domains, merging and primary selection.
"""
from contrib_intelligence.collectors.types import UserProfile, create_empty_activity
from contrib_intelligence.organization.confidence import assign_confidence, higher_confidence
from contrib_intelligence.organization.detector import OrganizationDetector
from contrib_intelligence.organization.email_parser import extract_org_from_email, is_blocked_domain
from contrib_intelligence.organization.normalizer import normalize_company_field, resolve_alias
from contrib_intelligence.organization.org_map import CaseInsensitiveOrgMap
from contrib_intelligence.organization.types import (
    Confidence,
    OrganizationAffiliation,
    SignalSource,
)


def test_normalize_company_field():
    assert normalize_company_field("  @Acme   Corp ") == "Acme Corp"
    assert normalize_company_field("@@Acme") == "@Acme"
    assert normalize_company_field("Acme, Inc.") == "Acme, Inc."
    assert normalize_company_field("") == ""


def test_resolve_alias():
    assert resolve_alias("Instagram") == "Meta"
    assert resolve_alias("YouTube") == "Alphabet"
    assert resolve_alias("twitter") == "X"
    assert resolve_alias("Acme") == "Acme"


def test_confidence_by_source():
    assert assign_confidence(SignalSource.COMPANY) is Confidence.HIGH
    assert assign_confidence(SignalSource.ORG) is Confidence.HIGH
    assert assign_confidence(SignalSource.EMAIL) is Confidence.MEDIUM
    assert higher_confidence(Confidence.MEDIUM, Confidence.HIGH) is Confidence.HIGH
    assert Confidence.LOW.label == "low"


def test_extract_org_from_email():
    assert extract_org_from_email("dev@eng.example.com") == "Example"
    assert extract_org_from_email("dev@example.co.uk") == "Example"
    assert extract_org_from_email("someone@gmail.com") is None
    assert extract_org_from_email("someone@GMX.net") is None
    assert extract_org_from_email("no-at-sign") is None
    assert extract_org_from_email(None) is None
    assert is_blocked_domain("Outlook.com")


def test_org_map_ignores_case_and_whitespace():
    orgs = CaseInsensitiveOrgMap()
    orgs.set("Acme", 1)
    orgs.set(" ACME ", 2)

    assert len(orgs) == 1
    assert orgs.get("acme") == 2
    assert orgs.canonical_key("acme") == " ACME "
    assert "aCmE" in orgs
    assert orgs.delete("acme") is True
    assert orgs.delete("acme") is False
    assert orgs.get("acme", 0) == 0


def test_company_field_is_high_confidence():
    result = OrganizationDetector().detect_for_contributor(UserProfile(username="alice", company="@Acme"))
    assert [(a.name, a.confidence) for a in result.affiliations] == [("Acme", Confidence.HIGH)]
    assert result.primary_org == "Acme"


def test_signals_merge_case_insensitively_to_max_confidence():
    profile = UserProfile(username="alice", company="acme", orgs=["ACME"])
    result = OrganizationDetector().detect_for_contributor(profile, {"alice@acme.com"})

    assert len(result.affiliations) == 1
    merged = result.affiliations[0]
    assert merged.name == "acme"
    assert merged.confidence is Confidence.HIGH
    assert merged.sources == [SignalSource.COMPANY, SignalSource.ORG, SignalSource.EMAIL]


def test_two_emails_on_one_domain_give_one_medium_affiliation():
    profile = UserProfile(username="bob")
    result = OrganizationDetector().detect_for_contributor(profile, {"a@eng.example.com", "b@example.com"})
    assert [(a.name, a.confidence) for a in result.affiliations] == [("Example", Confidence.MEDIUM)]
    assert result.primary_org == "Example"


def test_free_mail_yields_nothing():
    result = OrganizationDetector().detect_for_contributor(UserProfile(username="carol"), {"carol@gmail.com"})
    assert result.affiliations == []
    assert result.primary_org is None


def test_affiliations_rank_by_confidence_then_name():
    profile = UserProfile(username="dan", orgs=["zeta", "Beta"])
    result = OrganizationDetector().detect_for_contributor(profile, {"dan@alpha.io"})
    assert [a.name for a in result.affiliations] == ["Beta", "zeta", "Alpha"]


def test_pick_primary_prefers_company_source():
    affiliations = [
        OrganizationAffiliation("Beta", Confidence.HIGH, [SignalSource.ORG]),
        OrganizationAffiliation("Zed", Confidence.HIGH, [SignalSource.COMPANY]),
    ]
    assert OrganizationDetector.pick_primary(affiliations) == "Zed"

    affiliations = [
        OrganizationAffiliation("Mail", Confidence.MEDIUM, [SignalSource.EMAIL]),
        OrganizationAffiliation("Org", Confidence.HIGH, [SignalSource.ORG]),
    ]
    assert OrganizationDetector.pick_primary(affiliations) == "Org"
    assert OrganizationDetector.pick_primary([]) is None


def test_alias_applies_to_every_source():
    profile = UserProfile(username="erin", company="Instagram", orgs=["facebook"])
    result = OrganizationDetector().detect_for_contributor(profile)
    assert [a.name for a in result.affiliations] == ["Meta"]


def test_detect_for_contributors_uses_activity_emails():
    activity = create_empty_activity("frank")
    activity.emails.add("frank@initech.com")
    results = OrganizationDetector().detect_for_contributors(
        {"frank": UserProfile(username="frank"), "gina": UserProfile(username="gina", company="Hooli")},
        {"frank": activity},
    )
    assert results["frank"].primary_org == "Initech"
    assert results["gina"].primary_org == "Hooli"
