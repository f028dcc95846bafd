import pytest

from src.matching.config import MatchingConfig
from src.matching.scoring import (
    checklist_text,
    jaccard_score,
    token_coverage,
    weighted_substring_score,
)
from src.matching.tokenize import token_set
from src.matching.types import IssueRecord

AD_ISSUE = IssueRecord(
    id="ad-409",
    description="409 duplicate user error in Active Directory",
    application="Active Directory",
    root_cause="UPN already used by another account",
    checklist_items=("Check UPN uniqueness", "Check mail attribute conflict"),
)


def test_jaccard_identical_is_one():
    assert jaccard_score("Password reset loop", "password RESET loop!") == 1.0


def test_jaccard_partial_overlap():
    score = jaccard_score(
        "409 duplicate user in AD",
        "409 duplicate user error in Active Directory",
    )
    assert score == pytest.approx(0.5)


def test_jaccard_is_symmetric():
    a = "okta push notification not arriving"
    b = "push notification delayed in okta verify"
    assert jaccard_score(a, b) == jaccard_score(b, a)


def test_jaccard_empty_side_scores_zero():
    assert jaccard_score("", "anything here") == 0.0
    assert jaccard_score("an to", "anything here") == 0.0


def test_token_coverage_ratio():
    haystack = token_set("I have checked the following: UPN uniqueness")
    assert token_coverage("Check UPN uniqueness", haystack) == pytest.approx(2 / 3)
    assert token_coverage("Check mail attribute conflict", haystack) == 0.0
    assert token_coverage("ok", haystack) == 0.0


def test_checklist_text_skips_unusable_entries():
    assert checklist_text(["Check A", None, 7, "  "]) == "Check A 7"
    assert checklist_text(None) == ""


def test_weighted_score_empty_query_is_zero():
    assert weighted_substring_score("", AD_ISSUE) == 0.0
    assert weighted_substring_score("   ", AD_ISSUE) == 0.0


def test_weighted_score_record_without_text_is_zero():
    assert weighted_substring_score("409", IssueRecord(id="blank")) == 0.0


def test_weighted_score_short_code_gets_bonus():
    # description phrase (5) + short-query bonus (1) + token hit (1)
    assert weighted_substring_score("409", AD_ISSUE) == pytest.approx(7.0)


def test_weighted_score_token_hits_only():
    issue = IssueRecord(
        id="ad-409",
        description="409 duplicate user error in Active Directory",
        checklist_items=("Check UPN uniqueness",),
    )
    assert weighted_substring_score("409 AD error", issue) == pytest.approx(2.0)


def test_weighted_score_short_field_inside_query():
    issue = IssueRecord(id="okta", description="Push not arriving", application="Okta")
    # application found as a word in the query (2) + token "okta" (1)
    assert weighted_substring_score("okta verify broken", issue) == pytest.approx(3.0)


def test_weighted_score_short_field_requires_whole_words():
    issue = IssueRecord(id="ad", description="Sync stalled", application="AD")
    assert weighted_substring_score("cannot read file", issue) == 0.0


def test_weighted_score_uses_config_weights():
    config = MatchingConfig(description_weight=10.0, short_query_bonus=0.0)
    assert weighted_substring_score("409", AD_ISSUE, config) == pytest.approx(11.0)


def test_identical_description_gets_full_description_weight():
    score = weighted_substring_score(AD_ISSUE.description, AD_ISSUE)
    assert score >= MatchingConfig().description_weight


@pytest.mark.parametrize("query", ["use", "in", "r", "a"])
def test_weighted_score_ignores_word_fragments_and_stopwords(query):
    assert weighted_substring_score(query, AD_ISSUE) == 0.0
