"""
Contains the input structures: the field specs a Registry is built from and the items of a validation batch.
Both may also be given as plain mappings.
"""
from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple, Optional

from typeguard import CollectionCheckStrategy, TypeCheckError, check_type

from .errors import SchemaError


def _checked(mapping: Mapping[str, Any], key: str, expected_type: Any, kind: str) -> Any:
    value = mapping.get(key)
    try:
        check_type(value, expected_type, collection_check_strategy=CollectionCheckStrategy.ALL_ITEMS)
    except TypeCheckError as error:
        raise SchemaError(f"{kind} {mapping.get('name', '<unnamed>')!r}: {key}: {error}") from error
    return value


@dataclass(frozen=True)
class FieldSpec:
    """
    Describes a field to register: its name, the names of its rules in the order they run and optionally its
    initial state.
    """

    name: str
    rules: tuple[str, ...] = ()
    value: Any = None
    message: Optional[str] = None
    valid: Optional[bool] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError("A field needs a non-empty string as name.")
        if isinstance(self.rules, str):
            raise SchemaError(f"field {self.name!r}: rules must be a sequence of rule names, not a string")
        object.__setattr__(self, "rules", tuple(self.rules))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "FieldSpec":
        """
        Creates a FieldSpec from a mapping like `{"name": "username", "rules": ["required", "alpha"]}`.
        """
        if isinstance(mapping, FieldSpec):
            return mapping
        return cls(
            name=_checked(mapping, "name", str, "field"),
            rules=tuple(_checked(mapping, "rules", list[str] | tuple[str, ...], "field")),
            value=mapping.get("value"),
            message=_checked(mapping, "message", Optional[str], "field"),
            valid=_checked(mapping, "valid", Optional[bool], "field"),
        )


class BatchItem(NamedTuple):
    """A new value for the field `name`"""

    name: str
    value: Any = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "BatchItem":
        if isinstance(mapping, BatchItem):
            return mapping
        return cls(name=_checked(mapping, "name", str, "batch item"), value=mapping.get("value"))
