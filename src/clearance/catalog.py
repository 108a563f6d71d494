"""
Contains the RuleCatalog which maps rule names onto rule functions. Fields look up their rules in a catalog once,
when they get registered.
"""
from typing import Callable, Iterable, Iterator, Optional

import structlog

from .errors import RuleRegistrationError
from .types import RuleFunction

log = structlog.get_logger("clearance.catalog")


class RuleCatalog:
    """
    A named table of rule functions. Create one and share it by reference between all registries which should use
    the same rules. Registering a rule under an existing name overwrites the old one.
    """

    def __init__(self):
        self._rules: dict[str, RuleFunction] = {}

    def register_rule(self, name: str, func: RuleFunction) -> None:
        """
        Adds a custom validation rule. E.g.:
        ```
        def minimum_length(field, outcome, peers):
            if len(field.value) < 4:
                outcome.invalid("This value must be at least 4 characters long")
            else:
                outcome.valid()

        catalog.register_rule("minimumLength", minimum_length)
        ```
        """
        if not isinstance(name, str) or not name:
            raise RuleRegistrationError("You must provide a string for a rules name.")
        if not callable(func):
            raise RuleRegistrationError("You must provide a function for a rules logic.")
        if name in self._rules:
            log.debug("rule_overwritten", rule=name)
        else:
            log.debug("rule_registered", rule=name)
        self._rules[name] = func

    def rule(self, name: str) -> Callable[[RuleFunction], RuleFunction]:
        """
        Decorator form of `register_rule`. The decorated function is returned unchanged.
        """

        def decorator(func: RuleFunction) -> RuleFunction:
            self.register_rule(name, func)
            return func

        return decorator

    def remove_rule(self, name: str) -> None:
        """Removes the rule registered under `name`. Fields registered before keep their resolved rule."""
        if self._rules.pop(name, None) is not None:
            log.debug("rule_removed", rule=name)

    def get(self, name: str) -> Optional[RuleFunction]:
        """Returns the rule registered under `name` or None"""
        return self._rules.get(name)

    def resolve(self, names: Iterable[str]) -> tuple[Optional[RuleFunction], ...]:
        """
        Resolves the rule names in the given order. Names which are not registered resolve to None.
        """
        return tuple(self._rules.get(name) for name in names)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self):
        return f"RuleCatalog({list(self._rules)})"


default_catalog = RuleCatalog()


def register_rule(name: str, func: RuleFunction) -> None:
    """
    Registers a rule in the process wide `default_catalog` which is used by every Registry created without an
    explicit catalog.
    """
    default_catalog.register_rule(name, func)
