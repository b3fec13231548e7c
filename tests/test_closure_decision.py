import pytest

from marketplace.domain.closure.decision import (
    OUTCOME_ALREADY_PAID,
    OUTCOME_MUTUAL_NO_SHOW,
    OUTCOME_RESOLVE_ONLY,
    OUTCOME_SETTLE_CASH,
    decide_closure_outcome,
    normalize_action,
)


@pytest.mark.parametrize(
    "provider_action, client_action, has_payment, expected",
    [
        ("no_show", "no_show", False, OUTCOME_MUTUAL_NO_SHOW),
        # Mutual no-show wins even over an existing payment
        ("no_show", "no_show", True, OUTCOME_MUTUAL_NO_SHOW),
        ("none", "ok", True, OUTCOME_ALREADY_PAID),
        ("code_entered", "none", True, OUTCOME_ALREADY_PAID),
        ("none", "none", False, OUTCOME_SETTLE_CASH),
        ("none", "ok", False, OUTCOME_SETTLE_CASH),
        ("no_show", "ok", False, OUTCOME_SETTLE_CASH),
        ("code_entered", "no_show", False, OUTCOME_SETTLE_CASH),
        ("no_show", "none", False, OUTCOME_RESOLVE_ONLY),
        ("none", "no_show", False, OUTCOME_RESOLVE_ONLY),
        ("ok", "disputed", False, OUTCOME_RESOLVE_ONLY),
    ],
)
def test_decision_table(provider_action, client_action, has_payment, expected):
    assert decide_closure_outcome(provider_action, client_action, has_payment) == expected


def test_missing_actions_count_as_none():
    assert decide_closure_outcome(None, "", False) == OUTCOME_SETTLE_CASH


def test_normalize_action():
    assert normalize_action(None) == "none"
    assert normalize_action("") == "none"
    assert normalize_action("No_Show") == "No_Show"


@pytest.mark.parametrize("client_action", ["OK", " ok ", "Ok"])
def test_actions_are_matched_verbatim(client_action):
    assert decide_closure_outcome("none", client_action, False) == OUTCOME_RESOLVE_ONLY
