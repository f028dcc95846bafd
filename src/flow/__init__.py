"""Guided troubleshooting flow built on the matching core."""

from .orchestrator import (
    START,
    FlowError,
    FlowStage,
    FlowState,
    request_escalation,
    reset,
    submit_claimed_checks,
    submit_query,
)
from .prompt import build_escalation_payload, render_escalation_prompt

__all__ = [
    "START",
    "FlowError",
    "FlowStage",
    "FlowState",
    "submit_query",
    "submit_claimed_checks",
    "request_escalation",
    "reset",
    "render_escalation_prompt",
    "build_escalation_payload",
]
