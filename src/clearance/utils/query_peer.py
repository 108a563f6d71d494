"""
Contains some useful utility functions to be used in rules which look at other fields.
"""
from typing import Any, Mapping, Optional, TypeVar, overload

from typeguard import TypeCheckError, check_type

from clearance.field import FieldSnapshot

AttrT = TypeVar("AttrT")


def optional_peer(peers: Mapping[str, FieldSnapshot], peer_path: str, attribute_type: type[AttrT]) -> Optional[AttrT]:
    """
    Tries to query the `peers` with the provided `peer_path`. If the field or the attribute is not existent, `None`
    will be returned. If the attribute is found, the type will be checked and TypeCheckError will be raised if the
    type doesn't match the value.
    """
    try:
        return required_peer(peers, peer_path, attribute_type)
    except (KeyError, AttributeError):
        return None


@overload
def required_peer(peers: Mapping[str, FieldSnapshot], peer_path: str, attribute_type: type[AttrT]) -> AttrT:
    ...


@overload
def required_peer(peers: Mapping[str, FieldSnapshot], peer_path: str, attribute_type: Any) -> Any:
    ...


def required_peer(peers: Mapping[str, FieldSnapshot], peer_path: str, attribute_type: Any) -> Any:
    """
    Queries the `peers` with a path of the form `<field name>.<attribute>`, e.g. `"password.value"`. The field name
    may contain dots itself, the last segment is always the attribute. If the field is not existent a KeyError, if the
    attribute is not existent an AttributeError will be raised.
    If the attribute is found, the type will be checked and TypeCheckError will be raised if the type doesn't match the
    value.
    """
    field_name, _, attr_name = peer_path.rpartition(".")
    if not field_name:
        raise ValueError(f"{peer_path}: expected a path like '<field name>.<attribute>'")
    try:
        snapshot = peers[field_name]
    except KeyError as error:
        raise KeyError(f"{field_name}: Not found") from error
    try:
        value = getattr(snapshot, attr_name)
    except AttributeError as error:
        raise AttributeError(f"{peer_path}: Not found") from error
    try:
        check_type(value, attribute_type)
    except TypeCheckError as error:
        raise TypeCheckError(f"{peer_path}: {error}") from error
    return value
