import pytest

from src.flow.orchestrator import (
    START,
    FlowError,
    FlowStage,
    request_escalation,
    reset,
    submit_claimed_checks,
    submit_query,
)
from src.matching.types import IssueRecord

CATALOG = [
    IssueRecord(
        id="ad-409",
        description="409 duplicate user error in Active Directory",
        application="Active Directory",
        root_cause="UPN already in use",
        checklist_items=("Check UPN uniqueness", "Check mail attribute conflict"),
        solution="Rename the conflicting account.",
    )
]


def test_start_to_matched():
    state = submit_query(START, "409 AD error", CATALOG)

    assert state.stage == FlowStage.MATCHED
    assert state.issue.id == "ad-409"
    assert state.query == "409 AD error"


def test_start_to_unmatched():
    state = submit_query(START, "zzz_no_such_thing_987", CATALOG)

    assert state.stage == FlowStage.UNMATCHED
    assert state.issue is None


def test_gaps_found_branch():
    state = submit_query(START, "409", CATALOG)
    state = submit_claimed_checks(state, "I have checked the following:\n- UPN uniqueness")

    assert state.stage == FlowStage.GAPS_FOUND
    assert state.missing_items == ("Check mail attribute conflict",)
    assert state.claimed_items == ("I have checked the following:", "UPN uniqueness")
    assert not state.all_checked


def test_all_checked_branch():
    state = submit_query(START, "409", CATALOG)
    state = submit_claimed_checks(
        state, "- checked UPN uniqueness\n- checked mail attribute conflict"
    )

    assert state.stage == FlowStage.COMPLIANCE_CHECKED
    assert state.missing_items == tuple()
    assert state.all_checked


@pytest.mark.parametrize("claimed", ["- UPN uniqueness", "UPN uniqueness\nmail attribute conflict"])
def test_escalation_prompt_ready(claimed):
    state = submit_claimed_checks(submit_query(START, "409", CATALOG), claimed)
    final = request_escalation(state)

    assert final.stage == FlowStage.ESCALATION_PROMPT_READY
    assert "## User Issue\n409" in final.prompt
    assert "- Issue: 409 duplicate user error in Active Directory" in final.prompt
    assert final.missing_items == state.missing_items


def test_transitions_do_not_mutate_previous_state():
    matched = submit_query(START, "409", CATALOG)
    submit_claimed_checks(matched, "- UPN uniqueness")

    assert matched.stage == FlowStage.MATCHED
    assert matched.missing_items == tuple()
    assert START.stage == FlowStage.START


def test_invalid_transitions_raise():
    with pytest.raises(FlowError):
        submit_claimed_checks(START, "anything")
    with pytest.raises(FlowError):
        request_escalation(START)

    unmatched = submit_query(START, "zzz_no_such_thing_987", CATALOG)
    with pytest.raises(FlowError):
        submit_claimed_checks(unmatched, "anything")

    matched = submit_query(START, "409", CATALOG)
    with pytest.raises(FlowError):
        submit_query(matched, "409", CATALOG)
    with pytest.raises(FlowError):
        request_escalation(matched)


def test_reset_returns_to_start_from_any_stage():
    state = request_escalation(
        submit_claimed_checks(submit_query(START, "409", CATALOG), "")
    )

    assert reset(state) == START
    assert reset().stage == FlowStage.START
    assert submit_query(reset(state), "409", CATALOG).stage == FlowStage.MATCHED
