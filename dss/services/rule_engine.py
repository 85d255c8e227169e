"""
Generic rule engine for health rules.

Key patterns:
- Protocol-based rules: anything with a ``name`` and ``evaluate(data) -> RuleOutcome`` is a rule
- Rules are stateless; every evaluation returns its own outcome record
- Explicit Result type so a failing rule is skipped instead of aborting the batch
"""

from collections.abc import Sequence
from typing import Generic, Protocol, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from dss.domain.models import RuleSeverity

logger = structlog.get_logger(__name__)

# Outcome-or-exception wrapper for guarded rule calls
ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=Exception)
InputT = TypeVar("InputT")
InputT_contra = TypeVar("InputT_contra", contravariant=True)


class Result(Generic[ValueT, ErrorT]):
    """
    What one guarded rule call produced: its outcome, or the exception it raised.

    The engine never lets a rule's exception escape; it is carried here instead so the
    caller decides whether to skip, substitute a default, or re-raise.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if (value is None) == (error is None):
            raise ValueError("Result needs exactly one of value or error")
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return not self.is_ok()

    def unwrap(self) -> ValueT:
        """The value; re-raises the captured exception on an error result."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def unwrap_or(self, default: ValueT) -> ValueT:
        return default if self.is_err() else self.unwrap()

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise TypeError("ok result carries no error")
        return self._error


class RuleOutcome(BaseModel):
    """What a single rule concluded about its input."""

    model_config = ConfigDict(frozen=True)

    fired: bool
    severity: RuleSeverity = RuleSeverity.INFO
    recommendation: str = ""

    @classmethod
    def fire(cls, severity: RuleSeverity, recommendation: str) -> "RuleOutcome":
        return cls(fired=True, severity=severity, recommendation=recommendation)

    @classmethod
    def not_fired(cls) -> "RuleOutcome":
        return cls(fired=False)


class Rule(Protocol[InputT_contra]):
    """
    Protocol every health rule implements.

    Rules must not keep per-evaluation state on the instance.
    """

    name: str

    def evaluate(self, data: InputT_contra) -> RuleOutcome:
        """Evaluate the rule against ``data``."""
        ...


class RuleResult(BaseModel):
    """Aggregate of all rules that fired during one evaluation pass."""

    fired_rule_names: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    highest_severity: RuleSeverity = RuleSeverity.INFO

    def has_results(self) -> bool:
        return bool(self.fired_rule_names)

    def merge(self, other: "RuleResult") -> "RuleResult":
        """Combine two results, keeping this one's entries first."""
        return RuleResult(
            fired_rule_names=[*self.fired_rule_names, *other.fired_rule_names],
            recommendations=[*self.recommendations, *other.recommendations],
            highest_severity=RuleSeverity.highest(self.highest_severity, other.highest_severity),
        )


class RuleEngine:
    """
    Evaluates a batch of rules against one input.

    Design principles:
    - Rules run in list order
    - One failing rule is logged and skipped, never aborting the batch
    - No state survives between calls
    """

    def __init__(self) -> None:
        self.logger = logger.bind(component="rule_engine")

    def evaluate(self, data: InputT, rules: Sequence[Rule[InputT]]) -> RuleResult:
        """Evaluate ``rules`` against ``data`` and aggregate every rule that fired."""
        fired_rule_names: list[str] = []
        recommendations: list[str] = []
        highest_severity = RuleSeverity.INFO

        self.logger.debug("rule_evaluation_started", rule_count=len(rules))

        for rule in rules:
            outcome = self.run_rule(rule, data).unwrap_or(RuleOutcome.not_fired())
            if not outcome.fired:
                continue

            self.logger.info("rule_fired", rule=rule.name, severity=outcome.severity.value)
            fired_rule_names.append(rule.name)
            recommendations.append(outcome.recommendation)
            highest_severity = RuleSeverity.highest(highest_severity, outcome.severity)

        self.logger.debug("rule_evaluation_completed", fired_count=len(fired_rule_names))

        return RuleResult(
            fired_rule_names=fired_rule_names,
            recommendations=recommendations,
            highest_severity=highest_severity,
        )

    def run_rule(
        self, rule: Rule[InputT], data: InputT
    ) -> Result[RuleOutcome, Exception]:
        """Call one rule, capturing anything it raises instead of propagating it."""
        rule_name = getattr(rule, "name", type(rule).__name__)
        try:
            outcome = rule.evaluate(data)
            if not isinstance(outcome, RuleOutcome):
                raise TypeError(f"Rule {rule_name} returned {type(outcome).__name__}")
            return Result.ok(outcome)
        except Exception as e:
            self.logger.exception("rule_evaluation_failed", rule=rule_name, error=str(e))
            return Result.err(e)
