import pytest

from verified_auth.domain.entities import Identity, IdentityView, ProviderIdentity
from verified_auth.domain.results import AuthResult


def _identity() -> Identity:
    return Identity(
        id="authid-1",
        provider_identities=[
            ProviderIdentity(
                id="pi-1",
                entity_id="a@b.c",
                provider="emailpass-verified",
                provider_metadata={"password": "$scrypt$...", "plan": "pro"},
                user_metadata={"email": "a@b.c"},
            ),
            ProviderIdentity(
                id="pi-2", entity_id="123", provider="google", provider_metadata={}
            ),
        ],
        app_metadata={"customer_id": "cus_1"},
    )


def test_view_never_carries_the_password():
    identity = _identity()
    view = IdentityView.from_entity(identity)

    assert view.id == "authid-1"
    assert [pi.provider for pi in view.provider_identities] == [
        "emailpass-verified",
        "google",
    ]
    assert dict(view.provider_identities[0].provider_metadata) == {"plan": "pro"}
    assert "password" not in view.to_dict()["provider_identities"][0]["provider_metadata"]
    # built without touching the source record
    assert identity.provider_identities[0].provider_metadata["password"] == "$scrypt$..."


def test_view_is_read_only():
    view = IdentityView.from_entity(_identity())
    with pytest.raises(TypeError):
        view.provider_identities[0].provider_metadata["password"] = "x"


def test_to_dict_is_json_friendly():
    assert IdentityView.from_entity(_identity()).to_dict() == {
        "id": "authid-1",
        "provider_identities": [
            {
                "id": "pi-1",
                "entity_id": "a@b.c",
                "provider": "emailpass-verified",
                "provider_metadata": {"plan": "pro"},
                "user_metadata": {"email": "a@b.c"},
            },
            {
                "id": "pi-2",
                "entity_id": "123",
                "provider": "google",
                "provider_metadata": {},
                "user_metadata": {},
            },
        ],
        "app_metadata": {"customer_id": "cus_1"},
    }


def test_provider_identity_lookup():
    identity = _identity()
    assert identity.provider_identity("google").id == "pi-2"
    assert identity.provider_identity("github") is None


def test_success_with_error_is_not_a_valid_result():
    with pytest.raises(ValueError):
        AuthResult(success=True, error="boom")


def test_result_constructors():
    assert AuthResult.pending() == AuthResult(success=True, location="pending_verification")
    assert AuthResult.fail("nope") == AuthResult(success=False, error="nope")
    assert AuthResult.ok().auth_identity is None
    assert AuthResult.ok(_identity()).auth_identity.id == "authid-1"
