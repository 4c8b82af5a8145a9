from gala_voting.realtime.registry import ConnectionRegistry
from gala_voting.realtime.registry import ConnectionState
from gala_voting.realtime.tests.fakes import ADMIN_TOKEN
from gala_voting.realtime.tests.fakes import USER_TOKEN
from gala_voting.realtime.tests.fakes import fake_verifier


def test_new_connection_is_anonymous(registry):
    conn = registry.connect("a")
    assert conn.state is ConnectionState.CONNECTED_ANONYMOUS
    assert registry.connection_ids() == ("a",)
    assert registry.admin_connection_ids() == ()


def test_admin_token_promotes_connection(registry):
    registry.connect("a")
    assert registry.admit_admin("a", ADMIN_TOKEN) is True
    assert registry.state_of("a") is ConnectionState.CONNECTED_ADMIN
    assert registry.admin_connection_ids() == ("a",)


def test_invalid_token_is_silently_denied(registry):
    registry.connect("a")
    assert registry.admit_admin("a", "forged") is False
    assert registry.admit_admin("a", None) is False
    assert registry.state_of("a") is ConnectionState.CONNECTED_ANONYMOUS
    assert registry.admin_connection_ids() == ()


def test_non_admin_role_is_denied(registry):
    registry.connect("a")
    assert registry.admit_admin("a", USER_TOKEN) is False
    assert registry.state_of("a") is ConnectionState.CONNECTED_ANONYMOUS


def test_denied_retry_keeps_existing_admin(registry):
    registry.connect("a")
    registry.admit_admin("a", ADMIN_TOKEN)
    assert registry.admit_admin("a", "expired") is True
    assert registry.state_of("a") is ConnectionState.CONNECTED_ADMIN


def test_disconnect_leaves_every_set(registry):
    registry.connect("a")
    registry.connect("b")
    registry.admit_admin("a", ADMIN_TOKEN)
    registry.disconnect("a")
    assert registry.state_of("a") is ConnectionState.DISCONNECTED
    assert registry.connection_ids() == ("b",)
    assert registry.admin_connection_ids() == ()
    assert len(registry) == 1


def test_disconnect_unknown_sid_is_noop(registry):
    registry.disconnect("ghost")
    assert len(registry) == 0


def test_cannot_admit_unknown_connection(registry):
    assert registry.admit_admin("ghost", ADMIN_TOKEN) is False
    assert registry.admin_connection_ids() == ()


def test_disconnect_during_verification_is_not_admitted():
    holder = {}

    def verifier(token):
        holder["registry"].disconnect("a")
        return fake_verifier(token)

    registry = ConnectionRegistry(verifier)
    holder["registry"] = registry
    registry.connect("a")
    assert registry.admit_admin("a", ADMIN_TOKEN) is False
    assert registry.admin_connection_ids() == ()
    assert registry.state_of("a") is ConnectionState.DISCONNECTED
