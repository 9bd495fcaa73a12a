"""The rule catalogs used by :mod:`.rewrite`. All rules are sound, i.e., each
replacement is logically equivalent to the formula it replaces. The rules
on conjunctions and disjunctions apply within larger conjunctions and
disjunctions, respectively:

>>> from proprewrite.formula import And, F, Not, Or, VV
>>> p, q, r = VV.get('p', 'q', 'r')
>>> CONTRADICTION.apply(And(q, Not(p), r, p))
And(And(q, r), F)
>>> for r in BASIC_RULES[:3]:
...     print(r)
Flatten And/Or:  (A ∧ B) ∧ C ⇒ A ∧ B ∧ C, (A ∨ B) ∨ C ⇒ A ∨ B ∨ C
Double Negative:  ¬¬A ⇒ A
Not True:  ¬T ⇒ F
"""

from __future__ import annotations

from .formula import And, AndOr, F, Formula, Implies, Not, Or, T, and_or
from .matcher import A, AndOrMatcher, B, FM, MatchResult, TM, TypedMatcher
from .rule import FlattenRule, Rule, rule, simple_rule, wrap_and_or


FLATTEN_AND_OR = FlattenRule()

DOUBLE_NEGATION = rule('Double Negative', ~~A, lambda result: result['A'])

NOT_TRUE = rule('Not True', ~TM, lambda result: F)

NOT_FALSE = rule('Not False', ~FM, lambda result: T)

IDENTITY_AND = rule('Identity:And', A & A, lambda result: result['A'])

IDENTITY_OR = rule('Identity:Or', A | A, lambda result: result['A'])

# The reference B captures all further arguments of the inner node.
ABSORPTION_AND = rule(
    'Absorption:And', A & AndOrMatcher(False, [A], remainder=B),
    lambda result: result['A'])

ABSORPTION_OR = rule(
    'Absorption:Or', A | AndOrMatcher(True, [A], remainder=B),
    lambda result: result['A'])

ZERO_LAW_OR = rule('Zero Law', A | TM, lambda result: T)

ZERO_LAW_AND = rule('Zero Law', A & FM, lambda result: F)

IDENTITY_LAW_AND = rule('Identity Law', A & TM, lambda result: result['A'])

IDENTITY_LAW_OR = rule('Identity Law', A | FM, lambda result: result['A'])

EXCLUDED_MIDDLE = rule('Excluded Middle', A | ~A, lambda result: T)

CONTRADICTION = rule('Contradiction', A & ~A, lambda result: F)

IMPLICATION_ELIMINATION = rule(
    'Imply Equal', A >> B,
    lambda result: Or(Not(result['A']), result['B']))


def _eliminate_equivalence(result: MatchResult) -> Formula:
    a = result['A']
    b = result['B']
    return And(Implies(a, b), Implies(b, a))


EQUIVALENCE_ELIMINATION = rule(
    'Equivalence Equal', A.equivalent(B), _eliminate_equivalence)

ABSURDITY = rule(
    'Absurdity', (A >> B) & (A >> ~B), lambda result: Not(result['A']))


def _de_morgan(result: MatchResult) -> Formula:
    x = result['X']
    assert isinstance(x, AndOr)
    return and_or(not x.is_and, [Not(arg) for arg in x.args])


DE_MORGAN = simple_rule(
    'DeMorgan', ~TypedMatcher('X'), _de_morgan,
    symbol='¬(A ∧ B ∧ C) ⇒ ¬A ∨ ¬B ∨ ¬C, ¬(A ∨ B ∨ C) ⇒ ¬A ∧ ¬B ∧ ¬C')


def _distribute(result: MatchResult) -> Formula:
    x = result['X']
    a = result['A']
    assert isinstance(x, AndOr)
    return and_or(x.is_and, [and_or(not x.is_and, [a, arg]) for arg in x.args])


DISTRIBUTION_OR = wrap_and_or(
    'Distribution', TypedMatcher('X', op=And) | A, _distribute,
    symbol='(B ∧ C) ∨ A ⇒ (A ∨ B) ∧ (A ∨ C)')
"""Distribute disjunction over conjunction. The conjunction may have any
number of arguments.
"""

DISTRIBUTION_AND = wrap_and_or(
    'Distribution', TypedMatcher('X', op=Or) & A, _distribute,
    symbol='(B ∨ C) ∧ A ⇒ (A ∧ B) ∨ (A ∧ C)')
"""Distribute conjunction over disjunction. The disjunction may have any
number of arguments.
"""

BASIC_RULES: tuple[Rule, ...] = (
    FLATTEN_AND_OR,
    DOUBLE_NEGATION,
    NOT_TRUE,
    NOT_FALSE,
    IDENTITY_AND,
    IDENTITY_OR,
    ABSORPTION_AND,
    ABSORPTION_OR,
    ZERO_LAW_OR,
    ZERO_LAW_AND,
    IDENTITY_LAW_AND,
    IDENTITY_LAW_OR,
    EXCLUDED_MIDDLE,
    CONTRADICTION,
    IMPLICATION_ELIMINATION,
    EQUIVALENCE_ELIMINATION,
    ABSURDITY,
    DE_MORGAN)
"""Simplification rules. They eliminate implications and equivalences and
push negations inwards.
"""

CNF_RULES: tuple[Rule, ...] = BASIC_RULES + (DISTRIBUTION_OR,)
"""Rules for conjunctive normal form.
"""

DNF_RULES: tuple[Rule, ...] = BASIC_RULES + (DISTRIBUTION_AND,)
"""Rules for disjunctive normal form.
"""
