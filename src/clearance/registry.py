"""
Contains the Registry which owns the fields of a schema and validates batches of input values against them.
"""
import asyncio
from typing import Any, Iterable, Iterator, Mapping, Optional

import structlog
from frozendict import frozendict

from .analysis import ValidationResult
from .catalog import RuleCatalog, default_catalog
from .field import FieldEntry, FieldSnapshot
from .schema import BatchItem, FieldSpec
from .types import BatchCallback, ErrorCallback

log = structlog.get_logger("clearance.registry")

FILTER_KEYS = frozenset({"name", "value", "valid", "message"})


def _strictly_equal(expected: Any, actual: Any) -> bool:
    # booleans only match booleans, 1 == True must not match while 1 == 1.0 does
    if isinstance(expected, bool) != isinstance(actual, bool):
        return False
    return expected == actual


class Registry:
    """
    Handles the creation and validation of fields. E.g.:
    ```
    registry = Registry(
        [
            {"name": "username", "rules": ["required", "alpha"]},
            {"name": "password", "rules": ["required", "alphaNumeric"]},
        ]
    )
    registry.validate_batch(
        [{"name": "username", "value": "jasonbellamy"}, {"name": "password", "value": "unic0rn"}],
        valid=lambda fields: ...,  # there are no invalid fields
        invalid=lambda fields: ...,  # there are invalid fields
        complete=lambda fields: ...,  # the passed fields have been validated
    )
    ```
    Rule names are resolved against `catalog` or, if it is not given, against the process wide `default_catalog`.
    """

    def __init__(
        self,
        schema: Iterable[FieldSpec | Mapping[str, Any]] = (),
        catalog: Optional[RuleCatalog] = None,
    ):
        self.catalog: RuleCatalog = catalog if catalog is not None else default_catalog
        self._fields: dict[str, FieldEntry] = {}
        for spec in schema:
            self.register(spec)

    def register(self, spec: FieldSpec | Mapping[str, Any]) -> FieldEntry:
        """
        Creates the field described by `spec` and replaces any field with the same name. Rule names which are not
        registered in the catalog are kept as gaps; validating the field fails once its chain reaches such a gap.
        """
        spec = FieldSpec.from_mapping(spec)
        entry = FieldEntry(
            name=spec.name,
            rules=self.catalog.resolve(spec.rules),
            value=spec.value,
            message=spec.message,
            valid=spec.valid,
            collection=self,
        )
        if entry.missing_rules:
            log.warning(
                "unresolved_rules",
                field=spec.name,
                rules=[spec.rules[index] for index in entry.missing_rules],
            )
        if spec.name in self._fields:
            log.debug("field_replaced", field=spec.name)
        self._fields[spec.name] = entry
        return entry

    def query(self, filters: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> list[FieldEntry]:
        """
        Returns the fields whose properties match all the given filters. E.g.:
        ```
        registry.query(valid=False)        # all invalid fields
        registry.query(name="username")    # the username field (if registered)
        registry.query({"value": "unicorn"})
        ```
        Values are compared strictly: booleans only match booleans, everything else has to be equal (`1` matches
        `1.0`, `"1"` does not match `1`).
        """
        all_filters = {**(filters or {}), **kwargs}
        unknown = set(all_filters) - FILTER_KEYS
        if unknown:
            raise ValueError(f"Cannot filter fields by {sorted(unknown)}; allowed are {sorted(FILTER_KEYS)}")
        return [
            entry
            for entry in self._fields.values()
            if all(_strictly_equal(expected, getattr(entry, key)) for key, expected in all_filters.items())
        ]

    def get(self, name: str) -> Optional[FieldEntry]:
        return self._fields.get(name)

    def is_all_valid(self) -> bool:
        """True if every field is valid. A registry without fields is valid."""
        return all(entry.valid for entry in self._fields.values())

    def snapshots(self) -> frozendict[str, FieldSnapshot]:
        """The snapshots of all fields keyed by name"""
        return frozendict({name: entry.snapshot() for name, entry in self._fields.items()})

    def _snapshots_of(self, **filters: Any) -> list[FieldSnapshot]:
        return [entry.snapshot() for entry in self.query(filters)]

    # pylint: disable=too-many-arguments
    def validate_batch(
        self,
        data: Iterable[BatchItem | Mapping[str, Any]],
        valid: Optional[BatchCallback] = None,
        invalid: Optional[BatchCallback] = None,
        complete: Optional[BatchCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Sets the values of the fields named in `data` and runs their rule chains in the order of `data`.
        Items naming unknown fields are skipped.
        Each time a field finished its chain:
          - `valid` is called with the snapshots of all valid fields if the whole registry is valid,
          - `invalid` is called with the snapshots of all invalid fields otherwise,
          - `complete` is called with the snapshots of the fields named in `data` (in that order).
        Note that the callbacks therefore fire once per validated item and not once per batch. With async rules the
        items may complete in any order.
        """
        items = [BatchItem.from_mapping(item) for item in data]
        log.debug("batch_started", num_items=len(items))

        def on_done() -> None:
            if self.is_all_valid():
                if valid is not None:
                    valid(self._snapshots_of(valid=True))
            elif invalid is not None:
                invalid(self._snapshots_of(valid=False))
            if complete is not None:
                complete(self._completed_snapshots(items))

        for item in items:
            entry = self._fields.get(item.name)
            if entry is None:
                log.debug("unknown_field_skipped", field=item.name)
                continue
            entry.value = item.value
            entry.validate(on_done, on_error)

    def _completed_snapshots(self, items: list[BatchItem]) -> list[FieldSnapshot]:
        return [self._fields[item.name].snapshot() for item in items if item.name in self._fields]

    async def validate(
        self,
        data: Iterable[BatchItem | Mapping[str, Any]],
        valid: Optional[BatchCallback] = None,
        invalid: Optional[BatchCallback] = None,
        complete: Optional[BatchCallback] = None,
    ) -> ValidationResult:
        """
        Runs `validate_batch` (forwarding the callbacks), waits until every field named in `data` finished its rule
        chain and returns a ValidationResult. Exceptions raised by async rules are re-raised here. If an async rule
        gets cancelled, this coroutine raises `asyncio.CancelledError`.
        A rule which never reports its outcome keeps this coroutine pending; wrap it in `asyncio.wait_for` if you
        need a timeout. Fields without rules never run a chain and are not waited for.
        """
        items = [BatchItem.from_mapping(item) for item in data]
        expected = 0
        for item in items:
            entry = self._fields.get(item.name)
            if entry is not None and entry.rules:
                expected += 1
        finished = asyncio.get_running_loop().create_future()
        if expected == 0:
            finished.set_result(None)
        completed = 0

        def on_complete(snapshots: list[FieldSnapshot]) -> None:
            nonlocal completed
            if complete is not None:
                complete(snapshots)
            completed += 1
            if completed == expected and not finished.done():
                finished.set_result(None)

        def on_error(error: BaseException) -> None:
            if finished.done():
                return
            if isinstance(error, asyncio.CancelledError):
                finished.cancel()
            else:
                finished.set_exception(error)

        self.validate_batch(items, valid=valid, invalid=invalid, complete=on_complete, on_error=on_error)
        await finished
        return ValidationResult(self._completed_snapshots(items), all_valid=self.is_all_valid())

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[FieldEntry]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self):
        return f"Registry({list(self._fields.values())})"
