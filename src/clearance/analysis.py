"""
Contains functionality to analyze the result of a validation process
"""
from typing import Optional

from .field import FieldSnapshot


class ValidationResult:
    """
    The coroutine `Registry.validate` will return an instance of this class. It holds the snapshots of the fields
    named in the validated batch (in batch order) and provides properties for further analysis. Note that the values
    are calculated only if you use them.
    """

    def __init__(self, snapshots: list[FieldSnapshot], all_valid: bool):
        self._snapshots = snapshots
        self._all_valid = all_valid

        self._valid_fields: Optional[list[FieldSnapshot]] = None
        self._invalid_fields: Optional[list[FieldSnapshot]] = None
        self._messages: Optional[dict[str, str]] = None

    def _determine_valids(self):
        """Splits the snapshots into valid and invalid ones"""
        self._valid_fields = []
        self._invalid_fields = []
        for snapshot in self._snapshots:
            if snapshot.valid:
                self._valid_fields.append(snapshot)
            else:
                self._invalid_fields.append(snapshot)

    @property
    def snapshots(self) -> list[FieldSnapshot]:
        """Snapshots of all fields named in the batch"""
        return self._snapshots

    @property
    def all_valid(self) -> bool:
        """
        True if the whole registry (not only the batch) was valid when the last field of the batch finished
        """
        return self._all_valid

    @property
    def valid_fields(self) -> list[FieldSnapshot]:
        """Snapshots of the fields of the batch which are valid"""
        if self._valid_fields is None:
            self._determine_valids()
            assert self._valid_fields is not None
        return self._valid_fields

    @property
    def invalid_fields(self) -> list[FieldSnapshot]:
        """Snapshots of the fields of the batch which are invalid"""
        if self._invalid_fields is None:
            self._determine_valids()
            assert self._invalid_fields is not None
        return self._invalid_fields

    @property
    def messages(self) -> dict[str, str]:
        """Maps the names of the invalid fields onto their messages"""
        if self._messages is None:
            self._messages = {snapshot.name: snapshot.message for snapshot in self.invalid_fields}
        return self._messages

    @property
    def total(self) -> int:
        """Number of snapshots in this result"""
        return len(self._snapshots)

    @property
    def num_valid(self) -> int:
        """Number of valid fields (equivalent to `len(self.valid_fields)`)"""
        return len(self.valid_fields)

    @property
    def num_invalid(self) -> int:
        """Number of invalid fields (equivalent to `len(self.invalid_fields)`)"""
        return len(self.invalid_fields)

    def __repr__(self):
        return f"ValidationResult(total={self.total}, num_invalid={self.num_invalid}, all_valid={self._all_valid})"
