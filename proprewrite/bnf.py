"""This module :mod:`proprewrite.bnf` provides boolean normal form computations
using the famous Espresso algorithm. Techincally, we use the python package
`PyEDA <https://pyeda.readthedocs.io/en/latest/index.html>`_, which in turns
wraps a `C extension
<https://ptolemy.berkeley.edu/projects/embedded/pubs/downloads/espresso/_index.htm>`_
of the famous Berkeley Espresso library [BraytonEtAl-1984]_.

In contrast to the rule-based :func:`.to_cnf` and :func:`.to_dnf`, the normal
forms computed here are minimized. The order of arguments in the results is
determined by PyEDA.

>>> from proprewrite.formula import And, Implies, VV
>>> p, q = VV.get('p', 'q')
>>> dnf(And(Implies(p, q), p)) in (And(p, q), And(q, p))
True
"""

from dataclasses import dataclass, field
from pyeda.boolalg import expr, minimization  # type: ignore
from typing import ClassVar

from .formula import _F, _T, And, Equivalent, F, Formula, Implies, Not, Or, T, Var

from .support.tracing import trace  # noqa


@dataclass
class BooleanNormalForm:
    """Boolean normal form computation. Instances keep a bijection between
    the variables of the formulas seen so far and PyEDA variables.
    """

    _proprewrite_to_pyeda: ClassVar[dict[type[Formula], expr]] = {
        Equivalent: expr.Equal,
        Implies: expr.Implies,
        And: expr.And,
        Or: expr.Or,
        Not: expr.Not}

    _index: int = 0
    _vars_to_pyeda: dict[Var, expr.Variable] = field(default_factory=dict)
    _pyeda_to_vars: dict[expr.Variable, Var] = field(default_factory=dict)

    def cnf(self, f: Formula) -> Formula:
        """Compute a minimized conjunctive normal form. This is the negation
        of a minimized disjunctive normal form of ``Not(f)``, where the
        negation is moved inside.
        """
        dnf_of_negation = self._dnf(expr.Not(self._to_pyeda(f), simplify=False))
        return self._from_pyeda(expr.Not(dnf_of_negation).to_nnf())

    def dnf(self, f: Formula) -> Formula:
        """Compute a minimized disjunctive normal form.
        """
        return self._from_pyeda(self._dnf(self._to_pyeda(f)))

    def equivalent(self, f: Formula, g: Formula) -> bool:
        """Decide whether `f` and `g` are logically equivalent.

        >>> from proprewrite.formula import Not, Or, VV
        >>> p, q = VV.get('p', 'q')
        >>> BooleanNormalForm().equivalent(Implies(p, q), Or(Not(p), q))
        True
        """
        return self._to_pyeda(f).equivalent(self._to_pyeda(g))

    def _dnf(self, f_as_pyeda: expr) -> expr:
        dnf_as_pyeda = f_as_pyeda.to_dnf()
        if not isinstance(dnf_as_pyeda, (expr.Constant, expr.Literal)):
            dnf_as_pyeda, = minimization.espresso_exprs(dnf_as_pyeda)
        return dnf_as_pyeda

    def _to_pyeda(self, f: Formula) -> expr:
        match f:
            case Var():
                if f in self._vars_to_pyeda:
                    return self._vars_to_pyeda[f]
                new_exprvar = expr.exprvar('a', self._index)
                self._index += 1
                self._vars_to_pyeda[f] = new_exprvar
                self._pyeda_to_vars[new_exprvar] = f
                return new_exprvar
            case _T():
                return expr.expr(True)
            case _F():
                return expr.expr(False)
            case Not() | And() | Or() | Implies() | Equivalent():
                name = self._proprewrite_to_pyeda[f.op]
                xs = (self._to_pyeda(arg) for arg in f.args)
                return name(*xs, simplify=False)
            case _:
                assert False, repr(f)

    def _from_pyeda(self, f: expr) -> Formula:
        xs: expr
        match f:
            case expr.Variable():
                return self._pyeda_to_vars[f]
            case expr.Complement():
                # Complement of a variable is different from logical Not, and
                # it is not covered by our dictionary
                return Not(self._pyeda_to_vars[~ f])
            case expr.AndOp(xs=xs):
                args = (self._from_pyeda(x) for x in xs)
                return And(*args)
            case expr.OrOp(xs=xs):
                args = (self._from_pyeda(x) for x in xs)
                return Or(*args)
            case expr._Zero():
                return F
            case expr._One():
                return T
            case _:
                assert False, f


cnf = BooleanNormalForm().cnf
dnf = BooleanNormalForm().dnf
equivalent = BooleanNormalForm().equivalent
