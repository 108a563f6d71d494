import pytest
from frozendict import frozendict
from typeguard import TypeCheckError

from clearance import FieldSnapshot
from clearance.utils import optional_peer, required_peer

PEERS = frozendict(
    {
        "password": FieldSnapshot(name="password", value="unic0rn", valid=True, message=""),
        "user.age": FieldSnapshot(name="user.age", value=42, valid=False, message="too old"),
    }
)


class TestQueryPeer:
    def test_required_peer(self):
        assert required_peer(PEERS, "password.value", str) == "unic0rn"
        assert required_peer(PEERS, "user.age.value", int) == 42
        assert required_peer(PEERS, "user.age.valid", bool) is False

    def test_required_peer_errors(self):
        with pytest.raises(KeyError):
            required_peer(PEERS, "email.value", str)
        with pytest.raises(AttributeError):
            required_peer(PEERS, "password.length", int)
        with pytest.raises(TypeCheckError):
            required_peer(PEERS, "password.value", int)
        with pytest.raises(ValueError):
            required_peer(PEERS, "password", str)

    def test_optional_peer(self):
        assert optional_peer(PEERS, "email.value", str) is None
        assert optional_peer(PEERS, "password.length", int) is None
        assert optional_peer(PEERS, "user.age.message", str) == "too old"
        with pytest.raises(TypeCheckError):
            optional_peer(PEERS, "password.value", int)
