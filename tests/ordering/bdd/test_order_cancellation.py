"""BDD tests for order cancellation."""

from pytest_bdd import parsers, scenarios, when

scenarios("features/order_cancellation.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{actor_id}" cancels the order as "{role}"'))
def _(manager, attempt, order, actor_id, role):
    attempt(lambda: manager.cancel_order(order.id, actor_id, role, reason="Requested in scenario"))
