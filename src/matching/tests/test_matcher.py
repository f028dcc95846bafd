import pytest

from src.matching.config import MatchingConfig
from src.matching.matcher import (
    filter_catalog,
    find_best_match,
    find_similar,
    rank_issues,
)
from src.matching.types import IssueRecord


def _issue(issue_id: str, description: str, **fields) -> IssueRecord:
    return IssueRecord(id=issue_id, description=description, **fields)


CATALOG = [
    _issue(
        "ad-409",
        "409 duplicate user error in Active Directory",
        checklist_items=("Check UPN uniqueness", "Check mail attribute conflict"),
    ),
    _issue(
        "okta-push",
        "Okta Verify push notification not arriving",
        application="Okta",
        root_cause="Device registration expired",
        checklist_items=("Confirm device time sync", "Re-enroll Okta Verify"),
    ),
    _issue(
        "adp-sso",
        "ADP SSO login fails with SAML error",
        application="ADP",
        root_cause="Certificate rotated on IdP",
        checklist_items=("Compare SAML certificate thumbprint",),
    ),
]


def test_best_match_for_partial_query():
    result = find_best_match("409 AD error", CATALOG)

    assert result.issue is not None
    assert result.issue.id == "ad-409"
    assert result.score >= MatchingConfig().min_match_score


def test_best_match_short_code():
    assert find_best_match("409", CATALOG).issue.id == "ad-409"


def test_no_match_below_threshold():
    result = find_best_match("zzz_no_such_thing_987", CATALOG)

    assert result.issue is None
    assert result.score == 0.0


def test_single_coincidental_word_does_not_match():
    # "error" appears in two descriptions but is only one weighted hit.
    assert find_best_match("printer error", CATALOG).issue is None


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_never_matches(query):
    assert find_best_match(query, CATALOG).issue is None


def test_empty_catalog_returns_no_match():
    result = find_best_match("409", [])
    assert result.issue is None
    assert result.score == 0.0


def test_tie_break_keeps_catalog_order():
    first = _issue("first", "VPN drops after sleep")
    second = _issue("second", "VPN drops after sleep")

    assert find_best_match("vpn drops", [first, second]).issue.id == "first"
    assert find_best_match("vpn drops", [second, first]).issue.id == "second"


def test_records_without_text_are_skipped():
    catalog = [IssueRecord(id="empty"), _issue("vpn", "VPN drops after sleep")]
    assert find_best_match("vpn drops", catalog).issue.id == "vpn"


def test_threshold_is_configurable():
    strict = MatchingConfig(min_match_score=50.0)
    assert find_best_match("409", CATALOG, strict).issue is None


@pytest.mark.parametrize("catalog", ["409 duplicate", {"a": 1}, None, 42])
def test_non_sequence_catalog_is_rejected(catalog):
    with pytest.raises(TypeError):
        find_best_match("409", catalog)


def test_rank_issues_orders_by_score():
    ranked = rank_issues("okta verify push", CATALOG, limit=5)

    assert ranked[0].issue.id == "okta-push"
    assert all(hit.score > 0 for hit in ranked)
    assert [hit.score for hit in ranked] == sorted(
        (hit.score for hit in ranked), reverse=True
    )


def test_rank_issues_respects_limit_and_blank_query():
    assert len(rank_issues("error", CATALOG, limit=1)) == 1
    assert rank_issues("", CATALOG) == []
    assert rank_issues("error", CATALOG, limit=0) == []


def test_find_similar_exact_match_suppresses_suggestions():
    report = find_similar("409 Duplicate User Error in Active Directory!", CATALOG)

    assert report.exact is not None
    assert report.exact.id == "ad-409"
    assert report.suggestions == tuple()


def test_find_similar_near_duplicate():
    report = find_similar("409 duplicate user in AD", CATALOG)

    assert report.exact is None
    assert [hit.issue.id for hit in report.suggestions] == ["ad-409"]
    assert report.suggestions[0].score == pytest.approx(0.5)


def test_find_similar_nothing_related():
    report = find_similar("Printer jams on tray 2", CATALOG)

    assert report.exact is None
    assert report.suggestions == tuple()
    assert not report.has_duplicates


def test_find_similar_caps_and_sorts_suggestions():
    catalog = [
        _issue("a", "mailbox quota exceeded warning"),
        _issue("b", "mailbox quota exceeded warning shown daily"),
        _issue("c", "mailbox quota exceeded"),
        _issue("d", "mailbox quota exceeded warning banner"),
    ]
    config = MatchingConfig(max_suggestions=2)

    report = find_similar("mailbox quota exceeded warning today", catalog, config)

    assert len(report.suggestions) == 2
    assert report.suggestions[0].score >= report.suggestions[1].score
    assert report.suggestions[0].issue.id == "a"


def test_find_similar_blank_description():
    report = find_similar("   ", CATALOG)
    assert report.exact is None
    assert report.suggestions == tuple()


def test_filter_catalog_searches_all_fields():
    assert [it.id for it in filter_catalog("saml", CATALOG)] == ["adp-sso"]
    assert [it.id for it in filter_catalog("Re-enroll", CATALOG)] == ["okta-push"]
    assert filter_catalog("", CATALOG) == CATALOG
    assert filter_catalog("no such words", CATALOG) == []


@pytest.mark.parametrize("query", ["in", "a", "r", "use", "a in"])
def test_fragments_and_stopwords_do_not_match(query):
    assert find_best_match(query, CATALOG).issue is None


def test_short_digit_code_still_matches():
    result = find_best_match("409", CATALOG)

    assert result.issue.id == "ad-409"
