"""
Contains the types used in the validation framework
"""
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Mapping, Optional, Protocol, TypeAlias

if TYPE_CHECKING:
    from .field import FieldSnapshot


class OutcomeSink(Protocol):
    """
    The second argument of every rule. A rule has to call exactly one of the two methods exactly once,
    either directly or at any later time.
    """

    def valid(self, message: Optional[str] = None) -> None:
        ...

    def invalid(self, message: Optional[str] = None) -> None:
        ...


PeerSnapshots: TypeAlias = Mapping[str, "FieldSnapshot"]
SyncRuleFunction: TypeAlias = Callable[["FieldSnapshot", OutcomeSink, PeerSnapshots], None]
AsyncRuleFunction: TypeAlias = Callable[["FieldSnapshot", OutcomeSink, PeerSnapshots], Coroutine[Any, Any, None]]
RuleFunction: TypeAlias = SyncRuleFunction | AsyncRuleFunction
BatchCallback: TypeAlias = Callable[[list["FieldSnapshot"]], Any]
DoneCallback: TypeAlias = Callable[[], None]
ErrorCallback: TypeAlias = Callable[[BaseException], None]
