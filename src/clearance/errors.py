"""
Contains the exceptions raised by the validation framework. Note that validation outcomes are never reported as
exceptions. These are programmer errors only.
"""


class ClearanceError(Exception):
    """
    Base class of all errors raised by this package.
    """


class RuleRegistrationError(ClearanceError, TypeError):
    """
    Raised if a rule is registered with a name which is not a non-empty string or with a logic which is not callable.
    """


class MissingRuleError(ClearanceError, TypeError):
    """
    Raised when a rule chain reaches a rule name which could not be resolved at field registration time.
    """

    def __init__(self, field_name: str, index: int):
        super().__init__(f"{field_name}: rule #{index} is not registered in the rule catalog")
        self.field_name = field_name
        self.index = index


class OutcomeAlreadyReportedError(ClearanceError, RuntimeError):
    """
    Raised if a rule reports its outcome more than once.
    """


class SchemaError(ClearanceError, ValueError):
    """
    Raised if a field spec or a batch item is malformed.
    """
