import pytest

from leadflow.core.errors import NotAuthenticated
from leadflow.core.step_gate import (
    can_add_product,
    check_submission_ready,
    is_authenticated,
    require_authenticated,
    resolve_step,
)
from leadflow.store.models import FormState


def test_authentication_requires_an_id():
    assert is_authenticated(FormState()) is False
    assert is_authenticated(FormState(user={"name": "Alice"})) is False
    assert is_authenticated(FormState(user={"id": ""})) is False
    assert is_authenticated(FormState(user={"id": "u1"})) is True


@pytest.mark.parametrize("step", ["seller", "products"])
def test_gated_steps_redirect_to_auth(step):
    assert resolve_step(FormState(), step) == "auth"
    assert resolve_step(FormState(user={"id": "u1"}), step) == step


def test_entry_step_is_never_gated():
    assert resolve_step(FormState(), "auth") == "auth"


def test_require_authenticated_carries_redirect():
    with pytest.raises(NotAuthenticated) as exc:
        require_authenticated(FormState())
    assert exc.value.to_dict()["redirectTo"] == "auth"
    assert exc.value.status_code == 401


def test_minimum_products_scenario():
    state = FormState(user={"id": "u1"}, products=[{"name": "a"}, {"name": "b"}])
    ok, reason = check_submission_ready(state, minimum=3)
    assert ok is False
    assert reason == "not enough products"

    state.products.append({"name": "c"})
    assert check_submission_ready(state, minimum=3) == (True, "")


def test_can_add_product():
    assert can_add_product(FormState(products=[{}] * 4), maximum=5) is True
    assert can_add_product(FormState(products=[{}] * 5), maximum=5) is False
