"""
Closure decision table for cash appointments whose closure window expired

Inputs are the provider signal, the client signal and whether a completed
payment already exists. Rules are evaluated top to bottom; the first match wins.
"""

from typing import Optional

# Actor signals
ACTION_NONE = "none"
ACTION_NO_SHOW = "no_show"
ACTION_OK = "ok"
ACTION_CODE_ENTERED = "code_entered"

# Outcomes
OUTCOME_MUTUAL_NO_SHOW = "mutual_no_show"
OUTCOME_ALREADY_PAID = "already_paid"
OUTCOME_SETTLE_CASH = "settle_cash"
OUTCOME_CASH_CAP_EXCEEDED = "cash_cap_exceeded"  # settle_cash refined after the cap check
OUTCOME_RESOLVE_ONLY = "resolve_only"

ALL_OUTCOMES = (
    OUTCOME_MUTUAL_NO_SHOW,
    OUTCOME_ALREADY_PAID,
    OUTCOME_SETTLE_CASH,
    OUTCOME_CASH_CAP_EXCEEDED,
    OUTCOME_RESOLVE_ONLY,
)


def _is_mutual_no_show(provider_action: str, client_action: str, has_payment: bool) -> bool:
    return provider_action == ACTION_NO_SHOW and client_action == ACTION_NO_SHOW


def _is_already_paid(provider_action: str, client_action: str, has_payment: bool) -> bool:
    return has_payment


def _is_cash_settlement(provider_action: str, client_action: str, has_payment: bool) -> bool:
    return (
        client_action == ACTION_OK
        or provider_action == ACTION_CODE_ENTERED
        or (provider_action == ACTION_NONE and client_action == ACTION_NONE)
    )


DECISION_RULES = [
    (_is_mutual_no_show, OUTCOME_MUTUAL_NO_SHOW),
    (_is_already_paid, OUTCOME_ALREADY_PAID),
    (_is_cash_settlement, OUTCOME_SETTLE_CASH),
]


def normalize_action(action: Optional[str]) -> str:
    """Missing or empty signals count as none; anything else is compared verbatim"""
    if not action:
        return ACTION_NONE
    return str(action)


def decide_closure_outcome(
    provider_action: Optional[str], client_action: Optional[str], has_completed_payment: bool
) -> str:
    """
    Pick the resolution outcome for an expired pending_close appointment.

    Any combination not covered by a rule (one-sided no-show, conflicting
    signals) resolves without financial postings.
    """
    provider = normalize_action(provider_action)
    client = normalize_action(client_action)

    for matches, outcome in DECISION_RULES:
        if matches(provider, client, bool(has_completed_payment)):
            return outcome

    return OUTCOME_RESOLVE_ONLY
