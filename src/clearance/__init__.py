"""
This package enables you to validate named input fields against chains of composable rules. Rules report their
outcome through a continuation, so they may also decide asynchronously.
"""

from .analysis import ValidationResult
from .catalog import RuleCatalog, default_catalog, register_rule
from .errors import ClearanceError, MissingRuleError, OutcomeAlreadyReportedError, RuleRegistrationError, SchemaError
from .field import FieldEntry, FieldSnapshot
from .registry import Registry
from .schema import BatchItem, FieldSpec
from .types import AsyncRuleFunction, BatchCallback, OutcomeSink, RuleFunction, SyncRuleFunction
