"""
Contains the FieldEntry which holds the state of one named field and runs its rule chain.
"""
import asyncio
import inspect
import weakref
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

import structlog
from frozendict import frozendict

from .errors import MissingRuleError, OutcomeAlreadyReportedError
from .types import DoneCallback, ErrorCallback, RuleFunction

if TYPE_CHECKING:
    from .registry import Registry

log = structlog.get_logger("clearance.field")

# strong references to running async rules, the event loop only keeps weak ones
_background_tasks: set[asyncio.Task] = set()


@dataclass(frozen=True)
class FieldSnapshot:
    """
    The read-only view of a field which is handed to rules and to the batch callbacks.
    """

    name: str
    value: Any
    valid: bool
    message: str

    def as_dict(self) -> dict[str, Any]:
        """Returns the snapshot as plain dictionary"""
        return asdict(self)


class _Outcome:
    """
    The outcome sink of a single rule invocation. It accepts exactly one report.
    """

    def __init__(self, chain: "_RuleChain", index: int):
        self._chain = chain
        self._index = index
        self._reported = False

    def _claim(self):
        if self._reported:
            raise OutcomeAlreadyReportedError(
                f"{self._chain.entry.name}: rule #{self._index} reported its outcome more than once"
            )
        self._reported = True

    def valid(self, message: Optional[str] = None) -> None:
        """Marks the field as valid. The message is only kept if this is the last rule of the chain."""
        self._claim()
        self._chain.on_valid(self._index, message)

    def invalid(self, message: Optional[str] = None) -> None:
        """Marks the field as invalid and stops the chain."""
        self._claim()
        self._chain.on_invalid(self._index, message)


class _RuleChain:
    """
    Runs the rules of one field one after another. Every rule continues the chain by reporting to its outcome sink.
    """

    def __init__(self, entry: "FieldEntry", on_done: DoneCallback, on_error: Optional[ErrorCallback]):
        self.entry = entry
        self._on_done = on_done
        self._on_error = on_error
        self._running = False
        self._next_index: Optional[int] = None

    def run(self, index: int) -> None:
        """
        Invokes the rules starting at `index`. As long as rules report valid while they are invoked, the next rule
        runs in this loop; a rule which reports later continues the chain from its own call.
        """
        self._running = True
        try:
            next_index: Optional[int] = index
            while next_index is not None:
                self._next_index = None
                self._invoke(next_index)
                next_index = self._next_index
        finally:
            self._running = False

    def _invoke(self, index: int) -> None:
        rule = self.entry.rules[index]
        if rule is None:
            raise MissingRuleError(self.entry.name, index)
        outcome = _Outcome(self, index)
        if inspect.iscoroutinefunction(rule):
            loop = asyncio.get_running_loop()
            task = loop.create_task(rule(self.entry.snapshot(), outcome, self.entry.peer_snapshots()))
            _background_tasks.add(task)
            task.add_done_callback(lambda finished: self._async_rule_done(finished, index))
        else:
            rule(self.entry.snapshot(), outcome, self.entry.peer_snapshots())

    def on_valid(self, index: int, message: Optional[str]) -> None:
        self.entry.valid = True
        if index == len(self.entry.rules) - 1:
            self.entry.message = message
            log.debug("chain_finished", field=self.entry.name, valid=True)
            self._on_done()
        elif self._running:
            self._next_index = index + 1
        else:
            self.run(index + 1)

    def on_invalid(self, index: int, message: Optional[str]) -> None:
        self.entry.valid = False
        self.entry.message = message
        log.debug("chain_finished", field=self.entry.name, valid=False, rule_index=index)
        self._on_done()

    def _async_rule_done(self, task: asyncio.Task, index: int) -> None:
        _background_tasks.discard(task)
        error: Optional[BaseException]
        if task.cancelled():
            log.warning("async_rule_cancelled", field=self.entry.name, rule_index=index)
            error = asyncio.CancelledError(f"Rule #{index} of field '{self.entry.name}' got cancelled")
        else:
            error = task.exception()
            if error is None:
                return
            log.error("async_rule_failed", field=self.entry.name, rule_index=index, error=str(error))
        if self._on_error is not None:
            self._on_error(error)
        else:
            task.get_loop().call_exception_handler(
                {"message": f"Rule #{index} of field '{self.entry.name}' failed", "exception": error, "task": task}
            )


class FieldEntry:
    """
    One named field of a Registry. The rules are resolved once and fixed for the lifetime of the entry; only
    `value`, `message` and `valid` change.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        name: str,
        rules: Iterable[Optional[RuleFunction]] = (),
        value: Any = None,
        message: Optional[str] = None,
        valid: Optional[bool] = None,
        collection: Optional["Registry"] = None,
    ):
        self._name = name
        self._rules: tuple[Optional[RuleFunction], ...] = tuple(rules)
        self._collection = weakref.ref(collection) if collection is not None else None
        self._value: Any = ""
        self._message = ""
        self._valid = False
        self.value = value
        self.message = message
        self.valid = valid

    @property
    def name(self) -> str:
        return self._name

    @property
    def rules(self) -> tuple[Optional[RuleFunction], ...]:
        return self._rules

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._value = "" if value is None else value

    @property
    def message(self) -> str:
        return self._message

    @message.setter
    def message(self, message: Optional[str]) -> None:
        self._message = "" if message is None else message

    @property
    def valid(self) -> bool:
        return self._valid

    @valid.setter
    def valid(self, valid: Optional[bool]) -> None:
        self._valid = bool(valid)

    @property
    def missing_rules(self) -> list[int]:
        """Indices of the rules which could not be resolved when the field got registered"""
        return [index for index, rule in enumerate(self._rules) if rule is None]

    def snapshot(self) -> FieldSnapshot:
        return FieldSnapshot(name=self._name, value=self._value, valid=self._valid, message=self._message)

    def peer_snapshots(self) -> frozendict[str, FieldSnapshot]:
        """
        Returns the snapshots of all fields of the owning registry (including this one) keyed by name.
        A field without registry only sees itself.
        """
        registry = self._collection() if self._collection is not None else None
        if registry is None:
            return frozendict({self._name: self.snapshot()})
        return registry.snapshots()

    def validate(self, on_done: DoneCallback, on_error: Optional[ErrorCallback] = None) -> None:
        """
        Runs the rules in their order until one of them reports the field as invalid or the last one reports it
        as valid. `on_done` is called once the chain concluded. This may happen after this method returned if a rule
        reports its outcome later (e.g. an async rule).
        A field without rules is left untouched and `on_done` is never called.
        Exceptions of synchronous rules propagate, exceptions of async rules are passed to `on_error` or, if it is
        not given, to the exception handler of the event loop.
        """
        if not self._rules:
            log.debug("no_rules", field=self._name)
            return
        log.debug("chain_started", field=self._name, num_rules=len(self._rules))
        _RuleChain(self, on_done, on_error).run(0)

    def __repr__(self):
        return (
            f"FieldEntry(name={self._name!r}, value={self._value!r}, valid={self._valid!r}, "
            f"message={self._message!r})"
        )
