"""
Scoring, contributor merging and organization aggregation.
"""
import math
from datetime import datetime, timezone

from contrib_intelligence.analysis.aggregator import aggregate_by_organization, aggregate_multi_repo
from contrib_intelligence.analysis.scorer import calculate_score, raw_score, score_contributor
from contrib_intelligence.collectors.types import ContributorActivity, merge_contributors
from contrib_intelligence.organization.types import Confidence, OrganizationAffiliation, SignalSource


def activity(username, org=None, **counts):
    record = ContributorActivity(username=username, **counts)
    record.primary_org = org
    return record


def test_empty_record_scores_zero():
    assert calculate_score(activity("nobody")) == 0.0


def test_score_is_log_of_weighted_sum():
    alice = activity("alice", commits=10, prs_authored=2, prs_reviewed=3, issues_authored=1, issues_commented=4)
    assert raw_score(alice) == 10 + 6 + 6 + 1 + 2
    assert math.isclose(calculate_score(alice), math.log(26))


def test_score_is_monotone_in_every_counter():
    base = activity("x", commits=1, prs_authored=1, prs_reviewed=1, issues_authored=1, issues_commented=1)
    for counter in ["commits", "prs_authored", "prs_reviewed", "issues_authored", "issues_commented"]:
        bumped = base.copy()
        setattr(bumped, counter, getattr(bumped, counter) + 1)
        assert calculate_score(bumped) > calculate_score(base), counter


def test_score_contributor_carries_breakdown_and_org():
    scored = score_contributor(activity("alice", org="Acme", commits=2, issues_commented=1))
    assert scored.organization == "Acme"
    assert scored.breakdown.commits == 2
    assert scored.to_dict()["breakdown"]["issues_commented"] == 1


def test_merge_sums_counts_and_keeps_latest_date():
    early = datetime(2024, 1, 1, tzinfo=timezone.utc)
    late = datetime(2024, 5, 1, tzinfo=timezone.utc)
    a = activity("alice", commits=2)
    a.emails.add("alice@acme.io")
    a.last_activity_date = late
    b = activity("alice", prs_authored=1)
    b.emails.add("alice@other.org")
    b.last_activity_date = early

    combined = merge_contributors({}, {"alice": a})
    merge_contributors(combined, {"alice": b})

    record = combined["alice"]
    assert (record.commits, record.prs_authored) == (2, 1)
    assert record.emails == {"alice@acme.io", "alice@other.org"}
    assert record.last_activity_date == late


ACME = OrganizationAffiliation("Acme", Confidence.HIGH, [SignalSource.COMPANY])
MAIL = OrganizationAffiliation("Mail", Confidence.MEDIUM, [SignalSource.EMAIL])


def snapshot(contributors):
    return {
        name: (
            v.commits, v.prs_authored, v.prs_reviewed, v.issues_authored, v.issues_commented,
            frozenset(v.emails), v.last_activity_date, v.profile_fetched,
            tuple(a.name for a in v.affiliations), v.primary_org,
        )
        for name, v in contributors.items()
    }


def merged(*maps):
    result = {}
    for m in maps:
        merge_contributors(result, m)
    return result


def sample_maps():
    alice_a = activity("alice", "Acme", commits=1, prs_reviewed=2)
    alice_a.emails.add("alice@acme.io")
    alice_a.last_activity_date = datetime(2024, 2, 1, tzinfo=timezone.utc)
    alice_a.profile_fetched = True
    alice_a.affiliations = [ACME]
    bob_a = activity("bob", "Mail", prs_authored=2)
    bob_a.affiliations = [MAIL]

    alice_b = activity("alice", issues_commented=3, issues_authored=1)
    alice_b.emails.add("alice@home.net")
    alice_b.last_activity_date = datetime(2024, 6, 1, tzinfo=timezone.utc)

    bob_c = activity("bob", "Acme", commits=4)
    bob_c.affiliations = [ACME, MAIL]
    bob_c.last_activity_date = datetime(2024, 3, 1, tzinfo=timezone.utc)
    carol_c = activity("carol", commits=1)

    return {"alice": alice_a, "bob": bob_a}, {"alice": alice_b}, {"bob": bob_c, "carol": carol_c}


def test_merge_is_associative():
    a, b, c = sample_maps()
    left = merged(merged(a, b), c)
    right = merged(a, merged(b, c))
    assert snapshot(left) == snapshot(right)


def test_merge_is_commutative():
    a, b, c = sample_maps()
    assert snapshot(merged(a, b)) == snapshot(merged(b, a))
    assert snapshot(merged(a, b, c)) == snapshot(merged(c, b, a))


def test_merge_combines_every_field():
    a, b, c = sample_maps()
    result = snapshot(merged(a, b, c))

    assert result["alice"] == (
        1, 0, 2, 1, 3,
        frozenset({"alice@acme.io", "alice@home.net"}),
        datetime(2024, 6, 1, tzinfo=timezone.utc),
        True,
        ("Acme",), "Acme",
    )
    assert result["bob"][:5] == (4, 2, 0, 0, 0)
    assert result["bob"][8:] == (("Acme", "Mail"), "Acme")
    assert result["carol"][0] == 1


def test_longer_affiliation_list_wins_on_merge():
    one = activity("alice", org="Mail")
    one.affiliations = [MAIL]
    two = activity("alice", org="Acme")
    two.affiliations = [ACME, MAIL]

    combined = merged({"alice": one}, {"alice": two})
    assert combined["alice"].primary_org == "Acme"

    merge_contributors(combined, {"alice": one})
    assert combined["alice"].primary_org == "Acme"


def test_aggregate_groups_by_primary_org():
    contributors = {
        "alice": activity("alice", org="Acme", commits=10),
        "bob": activity("bob", org="Acme", commits=1),
        "carol": activity("carol", commits=3),
    }

    result = aggregate_by_organization(contributors)

    assert [o.name for o in result.organizations] == ["Acme"]
    acme = result.organizations[0]
    assert acme.contributor_count == 2
    assert acme.top_contributors == ["alice", "bob"]
    assert acme.breakdown.commits == 11
    assert math.isclose(acme.score, math.log(11) + math.log(2))
    assert [c.username for c in result.unknown] == ["carol"]


def test_aggregate_orders_organizations_by_score_then_name():
    contributors = {
        "a": activity("a", org="Zeta", commits=5),
        "b": activity("b", org="Alpha", commits=5),
        "c": activity("c", org="Big", commits=50),
    }
    names = [o.name for o in aggregate_by_organization(contributors).organizations]
    assert names == ["Big", "Alpha", "Zeta"]


def test_top_contributors_capped_at_three():
    contributors = {name: activity(name, org="Acme", commits=n) for n, name in enumerate("abcde", 1)}
    acme = aggregate_by_organization(contributors).organizations[0]
    assert acme.top_contributors == ["e", "d", "c"]


def test_multi_repo_merge_does_not_alias_inputs():
    first = {"alice": activity("alice", commits=1)}
    second = {"alice": activity("alice", commits=2), "bob": activity("bob", commits=1)}

    result = aggregate_multi_repo([("o/a", first), ("o/b", second)])

    assert result.repos == ["o/a", "o/b"]
    assert result.contributors["alice"].commits == 3
    assert result.contributors["alice"] is not first["alice"]
    assert first["alice"].commits == 1
    assert second["alice"].commits == 2
