"""Guided troubleshooting flow: match, compare checks, escalate.

The flow state is an immutable value. Every transition takes the current
state and returns a new one; callers keep whichever state they want, so
``reset`` is simply returning to :data:`START`.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
import logging

from ..matching.checklist import compute_missing, split_claimed_text
from ..matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from ..matching.matcher import find_best_match
from ..matching.types import IssueRecord, MatchResult
from .prompt import render_escalation_prompt

log = logging.getLogger(__name__)


class FlowStage(Enum):
    START = "start"
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    COMPLIANCE_CHECKED = "compliance_checked"
    GAPS_FOUND = "gaps_found"
    ESCALATION_PROMPT_READY = "escalation_prompt_ready"


class FlowError(ValueError):
    """Raised when a transition is not allowed from the current stage."""


@dataclass(frozen=True)
class FlowState:
    stage: FlowStage = FlowStage.START
    query: str = ""
    match: MatchResult | None = None
    claimed_text: str = ""
    claimed_items: tuple[str, ...] = field(default_factory=tuple)
    missing_items: tuple[str, ...] = field(default_factory=tuple)
    prompt: str = ""

    @property
    def issue(self) -> IssueRecord | None:
        return self.match.issue if self.match else None

    @property
    def all_checked(self) -> bool:
        return self.stage == FlowStage.COMPLIANCE_CHECKED or (
            self.stage == FlowStage.ESCALATION_PROMPT_READY and not self.missing_items
        )


START = FlowState()

_COMPLIANCE_STAGES = {FlowStage.COMPLIANCE_CHECKED, FlowStage.GAPS_FOUND}


def _require_stage(state: FlowState, allowed: set[FlowStage], action: str) -> None:
    if state.stage not in allowed:
        expected = ", ".join(sorted(stage.value for stage in allowed))
        raise FlowError(
            f"Cannot {action} from stage '{state.stage.value}' (expected: {expected})"
        )


def submit_query(
    state: FlowState,
    query: str,
    catalog: Sequence[IssueRecord],
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> FlowState:
    """Start -> Matched | Unmatched."""
    _require_stage(state, {FlowStage.START}, "submit a query")

    match = find_best_match(query, catalog, config)
    stage = FlowStage.MATCHED if match.matched else FlowStage.UNMATCHED
    log.info(f"Flow: query submitted -> {stage.value}")
    return replace(state, stage=stage, query=query, match=match)


def submit_claimed_checks(
    state: FlowState,
    claimed_text: str,
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> FlowState:
    """Matched -> ComplianceChecked | GapsFound."""
    _require_stage(state, {FlowStage.MATCHED}, "submit claimed checks")

    issue = state.issue
    claimed_items = tuple(split_claimed_text(claimed_text))
    standard = issue.checklist_items if issue else ()
    missing = compute_missing(standard, claimed_items, config).missing_items

    stage = FlowStage.GAPS_FOUND if missing else FlowStage.COMPLIANCE_CHECKED
    log.info(f"Flow: {len(missing)} missing check(s) -> {stage.value}")
    return replace(
        state,
        stage=stage,
        claimed_text=claimed_text,
        claimed_items=claimed_items,
        missing_items=missing,
    )


def request_escalation(state: FlowState) -> FlowState:
    """ComplianceChecked | GapsFound -> EscalationPromptReady."""
    _require_stage(state, _COMPLIANCE_STAGES, "request escalation")

    prompt = render_escalation_prompt(
        state.query,
        state.issue,
        state.claimed_items,
        state.missing_items,
    )
    log.info("Flow: escalation prompt assembled")
    return replace(state, stage=FlowStage.ESCALATION_PROMPT_READY, prompt=prompt)


def reset(state: FlowState | None = None) -> FlowState:
    """Return to the start stage from anywhere."""
    return START
