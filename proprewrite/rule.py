"""Rewrite rules. A :class:`Rule` recognizes formulas at their toplevel and
computes an equivalent replacement. Most rules are instances of
:class:`MatcherRule`, which pairs a :class:`.FormulaMatcher` with a
replacement builder:

>>> from proprewrite.formula import And, Or, VV
>>> from proprewrite.matcher import A, B
>>> p, q, r = VV.get('p', 'q', 'r')
>>> absorption = rule('Absorption', A & (A | B), lambda result: result['A'])
>>> print(absorption)
Absorption:  A ∧ (A ∨ B) ⇒ A

Since the matcher is a conjunction, :func:`rule` has wrapped it via
:func:`wrap_and_or` so that it also applies within larger conjunctions:

>>> absorption(And(q, Or(p, r), r, p))
And(And(q, p), r)
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
import itertools
from typing import Callable, Iterator, Optional

from .formula import Formula, Var, and_or
from .matcher import AndOrMatcher, FormulaMatcher, literal, MatchResult, ref
from .support.tracing import trace  # noqa


ReplacementBuilder = Callable[[MatchResult], Formula]
"""Computes the replacement from a successful match.
"""


class RuleNotApplicableError(ValueError):
    """Raised by :meth:`Rule.apply` when the rule does not match the formula.
    Use :meth:`Rule.try_apply` in situations where the rule might not match.
    """

    def __init__(self, rule: Rule, f: Formula) -> None:
        super().__init__(f'{rule.name} is not applicable to {f}')
        self.rule = rule
        self.formula = f


class Rule:
    """This abstract base class specifies the interface of all rules. Rules
    have no state and can be applied to arbitrarily many formulas.
    """

    name: str
    """A human readable name.
    """

    symbol_representation: str
    """A display form like ``A ∧ T ⇒ A``.
    """

    def __call__(self, f: Formula) -> Optional[Formula]:
        return self.try_apply(f)

    def __str__(self) -> str:
        return f'{self.name}:  {self.symbol_representation}'

    def apply(self, f: Formula) -> Formula:
        """The replacement for `f`. Raises :exc:`RuleNotApplicableError` if
        `self` does not match `f`.
        """
        result = self.try_apply(f)
        if result is None:
            raise RuleNotApplicableError(self, f)
        return result

    @abstractmethod
    def matches(self, f: Formula) -> bool:
        ...

    @abstractmethod
    def try_apply(self, f: Formula) -> Optional[Formula]:
        """The replacement for `f`, or :obj:`None` if `self` does not match
        `f`.
        """
        ...


@dataclass(frozen=True)
class MatcherRule(Rule):

    name: str
    symbol_representation: str
    matcher: FormulaMatcher
    builder: ReplacementBuilder

    def matches(self, f: Formula) -> bool:
        return self.matcher.matches(f) is not None

    def try_apply(self, f: Formula) -> Optional[Formula]:
        result = self.matcher.matches(f)
        if result is None:
            return None
        return self.builder(result)


class FlattenRule(Rule):
    """Lift arguments of nested conjunctions into their parent conjunction,
    and the same for disjunctions. Only one level is lifted per application.

    >>> from proprewrite.formula import And, Or, VV
    >>> p, q, r = VV.get('p', 'q', 'r')
    >>> FlattenRule().apply(And(Or(p, q), And(q, Or(r, p)), r))
    And(Or(p, q), q, Or(r, p), r)
    """

    name = 'Flatten And/Or'
    symbol_representation = '(A ∧ B) ∧ C ⇒ A ∧ B ∧ C, (A ∨ B) ∨ C ⇒ A ∨ B ∨ C'

    def matches(self, f: Formula) -> bool:
        if not Formula.is_and_or(f):
            return False
        return any(arg.op is f.op for arg in f.args)

    def try_apply(self, f: Formula) -> Optional[Formula]:
        if not self.matches(f):
            return None
        assert Formula.is_and_or(f)
        args: list[Formula] = []
        for arg in f.args:
            if arg.op is f.op:
                args.extend(arg.args)
            else:
                args.append(arg)
        return f.op(*args)


_ref_index: Iterator[int] = itertools.count(1)


def fresh_ref_name(avoid: frozenset[str] = frozenset(), suffix: str = '_remainder') -> str:
    """Return a reference name that has not been returned before and does not
    occur in `avoid`, from the sequence G0001<suffix>, G0002<suffix>, ...

    >>> fresh_ref_name() != fresh_ref_name()
    True
    """
    while True:
        name = f'G{next(_ref_index):04d}{suffix}'
        if name not in avoid:
            return name


def symbol_representation(matcher: FormulaMatcher, builder: ReplacementBuilder) -> str:
    """Generate a display form from `matcher` and `builder`. The right hand
    side is obtained by applying `builder` to a dummy match that binds each
    reference name to the variable of the same name.
    """
    dummy_map = {name: Var(name) for name in matcher.ref_names}
    rhs = builder(MatchResult(dummy_map, Var('_'), matcher))
    return f'{matcher} ⇒ {rhs}'


def simple_rule(name: str, matcher: FormulaMatcher, builder: ReplacementBuilder,
                symbol: Optional[str] = None) -> MatcherRule:
    """Build a :class:`MatcherRule` without further ado.
    """
    if symbol is None:
        symbol = symbol_representation(matcher, builder)
    return MatcherRule(name, symbol, matcher, builder)


def wrap_and_or(name: str, matcher: AndOrMatcher, builder: ReplacementBuilder,
                symbol: Optional[str] = None) -> MatcherRule:
    """Generalize a rule on conjunctions or disjunctions to formulas with
    further arguments. The returned rule matches with a fresh reference name
    for the remainder. If the remainder is the neutral element, the replacement
    is the one computed by `builder`. Otherwise, it is the conjunction or
    disjunction of the remainder and the replacement computed by `builder`.

    If `matcher` already has a remainder other than the neutral element, this
    is equivalent to :func:`simple_rule`.

    >>> from proprewrite.formula import F, Or, VV
    >>> from proprewrite.matcher import A, FM
    >>> p, q = VV.get('p', 'q')
    >>> identity_law = wrap_and_or('Identity Law', A | FM, lambda result: result['A'])
    >>> identity_law(Or(p, F))
    p
    >>> identity_law(Or(F, q, p))
    Or(p, q)
    """
    if symbol is None:
        symbol = symbol_representation(matcher, builder)
    if matcher.remainder is not literal(matcher.is_and):
        return MatcherRule(name, symbol, matcher, builder)
    remainder_name = fresh_ref_name(avoid=matcher.ref_names)
    wrapped_matcher = AndOrMatcher(matcher.is_and, matcher.matchers, ref(remainder_name))
    neutral_element = and_or(matcher.is_and, [])

    def wrapped_builder(result: MatchResult) -> Formula:
        remainder = result[remainder_name]
        replacement = builder(result)
        if remainder == neutral_element:
            return replacement
        return and_or(matcher.is_and, [remainder, replacement])

    return MatcherRule(name, symbol, wrapped_matcher, wrapped_builder)


def rule(name: str, matcher: FormulaMatcher, builder: ReplacementBuilder,
         symbol: Optional[str] = None) -> MatcherRule:
    """Build a rule from `matcher` and `builder`. Matchers for conjunctions
    and disjunctions are generalized via :func:`wrap_and_or`.
    """
    if isinstance(matcher, AndOrMatcher):
        return wrap_and_or(name, matcher, builder, symbol)
    return simple_rule(name, matcher, builder, symbol)

