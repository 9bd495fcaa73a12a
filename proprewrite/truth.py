"""Semantics of formulas via truth tables. A truth assignment maps variable
names to :obj:`True` or :obj:`False`. All functions here enumerate truth
tables and are therefore exponential in the number of variables.

>>> from proprewrite.formula import Implies, Not, Or, VV
>>> p, q = VV.get('p', 'q')
>>> is_tautology(Or(p, Not(p)))
True
>>> value_equals(Implies(p, q), Or(Not(p), q))
True
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Optional

from .formula import _F, _T, And, Equivalent, Formula, Implies, Not, Or, Var, and_or
from .support.tracing import trace  # noqa


TruthAssignment = Mapping[str, bool]


class UnassignedVariableError(KeyError):
    """Raised by :func:`evaluate` when a variable of the formula has no value
    in the truth assignment.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f'variable {self.name!r} is not assigned'


def evaluate(f: Formula, assignment: TruthAssignment) -> bool:
    """The truth value of `f` under `assignment`.

    >>> from proprewrite.formula import Equivalent, VV
    >>> p, q = VV.get('p', 'q')
    >>> evaluate(Equivalent(p, q), {'p': True, 'q': False})
    False
    >>> evaluate(Equivalent(p, q), {'p': True})
    Traceback (most recent call last):
    ...
    proprewrite.truth.UnassignedVariableError: variable 'q' is not assigned
    """
    match f:
        case Var():
            try:
                return assignment[f.name]
            except KeyError:
                raise UnassignedVariableError(f.name) from None
        case _T():
            return True
        case _F():
            return False
        case Not():
            return not evaluate(f.arg, assignment)
        case And():
            return all(evaluate(arg, assignment) for arg in f.args)
        case Or():
            return any(evaluate(arg, assignment) for arg in f.args)
        case Implies():
            return not evaluate(f.lhs, assignment) or evaluate(f.rhs, assignment)
        case Equivalent():
            return evaluate(f.lhs, assignment) == evaluate(f.rhs, assignment)
        case _:
            assert False, repr(f)


def truth_assignments(names: Iterable[str]) -> Iterator[dict[str, bool]]:
    """All truth assignments for `names`. The names are sorted, and the
    assignments are enumerated by binary counting, where the first name is
    the least significant bit.

    >>> for assignment in truth_assignments(['q', 'p']):
    ...     print(assignment)
    {'p': False, 'q': False}
    {'p': True, 'q': False}
    {'p': False, 'q': True}
    {'p': True, 'q': True}
    """
    sorted_names = sorted(set(names))
    for bits in range(1 << len(sorted_names)):
        yield {name: bool(bits >> i & 1) for i, name in enumerate(sorted_names)}


def truth_table(f: Formula, names: Optional[Iterable[str]] = None) \
        -> Iterator[tuple[dict[str, bool], bool]]:
    """The truth table of `f` as pairs of assignments and truth values. By
    default, the assignments range over the variables of `f`.
    """
    if names is None:
        names = f.variable_names
    for assignment in truth_assignments(names):
        yield assignment, evaluate(f, assignment)


def is_tautology(f: Formula) -> bool:
    return all(value for _, value in truth_table(f))


def is_contradiction(f: Formula) -> bool:
    return not any(value for _, value in truth_table(f))


def is_satisfiable(f: Formula) -> bool:
    return any(value for _, value in truth_table(f))


def value_equals(f: Formula, g: Formula) -> bool:
    """Decide whether `f` and `g` are logically equivalent. This is a semantic
    test, in contrast to ``f == g``.
    """
    names = f.variable_names | g.variable_names
    return all(evaluate(f, assignment) == evaluate(g, assignment)
               for assignment in truth_assignments(names))


def to_full_dnf(f: Formula, names: Optional[Iterable[str]] = None) -> Formula:
    """The full disjunctive normal form of `f` over `names`, which defaults to
    the variables of `f`. This is the disjunction of the minterms of the
    satisfying assignments in the order of :func:`truth_assignments`. Each
    minterm contains one literal for each name, in the order of the sorted
    names.

    >>> from proprewrite.formula import Implies, VV
    >>> p, q = VV.get('p', 'q')
    >>> to_full_dnf(Implies(p, q))
    Or(And(Not(p), Not(q)), And(Not(p), q), And(p, q))
    >>> to_full_dnf(p, names=['p', 'q'])
    Or(And(p, Not(q)), And(p, q))
    >>> to_full_dnf(And(p, Not(p)))
    F
    """
    if names is None:
        names = f.variable_names
    names = set(names)
    missing = f.variable_names - names
    if missing:
        raise ValueError(f'names must contain all variables of f; {missing=}')
    minterms = []
    for assignment, value in truth_table(f, names):
        if value:
            literals = [Var(name) if assignment[name] else Not(Var(name))
                        for name in sorted(assignment)]
            minterms.append(and_or(True, literals))
    return and_or(False, minterms)
