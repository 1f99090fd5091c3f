import json
from unittest.mock import patch

from leadflow.core.actions import AddProduct, ResetForm, SetSeller, SetStep, SetSubmitting, SetUser
from leadflow.store.form_repo import FormStateStore, _key, replay_actions
from leadflow.store.models import FormState


def _product(name):
    return {"name": name, "mrp": 100, "msp": 80,
            "frontImage": "https://img/f.jpg", "sideImage": "https://img/s.jpg", "backImage": "https://img/b.jpg"}


def test_load_missing_key_returns_none(fake_redis):
    assert FormStateStore().load("first-run") is None


def test_save_writes_full_state_with_ttl(fake_redis):
    state = FormState(user={"id": "u1"}, products=[_product("a")], currentStep="products", isSubmitting=True)
    FormStateStore().save("s1", state)

    raw = fake_redis.get(_key("s1"))
    assert json.loads(raw) == state.to_dict()
    assert fake_redis.ttl(_key("s1")) > 0


def test_load_returns_reset_then_replay(fake_redis):
    state = FormState(
        user={"id": "u1", "name": "Alice"},
        seller={"id": "s1"},
        products=[_product("a"), _product("b")],
        currentStep="products",
        isSubmitting=False,
    )
    store = FormStateStore()
    store.save("s1", state)

    actions = store.load("s1")
    assert actions == [
        ResetForm(),
        SetUser({"id": "u1", "name": "Alice"}),
        SetSeller({"id": "s1"}),
        AddProduct(_product("a")),
        AddProduct(_product("b")),
        SetStep("products"),
        SetSubmitting(False),
    ]


def test_replay_skips_absent_records():
    actions = replay_actions({"user": None, "seller": None, "products": [], "currentStep": "auth", "isSubmitting": False})
    assert actions == [ResetForm(), SetStep("auth"), SetSubmitting(False)]


def test_load_drops_unknown_fields(fake_redis):
    fake_redis.set(_key("s1"), json.dumps({
        "user": {"id": "u1", "legacy": 1},
        "products": [{**_product("a"), "preview": "data:..."}],
        "currentStep": "seller",
        "debug": True,
    }))
    actions = FormStateStore().load("s1")
    assert SetUser({"id": "u1"}) in actions
    assert AddProduct(_product("a")) in actions


@patch("leadflow.store.form_repo.log")
def test_corrupt_json_is_discarded_and_logged(mock_log, fake_redis):
    fake_redis.set(_key("s1"), "{not json")
    assert FormStateStore().load("s1") is None
    assert fake_redis.get(_key("s1")) is None
    mock_log.assert_called_once()
    assert mock_log.call_args.kwargs["event"] == "form_state_corrupt"


@patch("leadflow.store.form_repo.log")
def test_wrong_shapes_are_corrupt(mock_log, fake_redis):
    store = FormStateStore()
    bad_payloads = [
        [],
        {"products": {"0": {}}},
        {"products": ["not-an-object"]},
        {"user": "alice"},
        {"currentStep": "checkout"},
        {"isSubmitting": "yes"},
    ]
    for payload in bad_payloads:
        fake_redis.set(_key("s1"), json.dumps(payload))
        assert store.load("s1") is None
        assert fake_redis.get(_key("s1")) is None
    assert mock_log.call_count == len(bad_payloads)


def test_delete(fake_redis):
    store = FormStateStore()
    store.save("s1", FormState())
    store.delete("s1")
    assert fake_redis.get(_key("s1")) is None
