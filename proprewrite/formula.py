r"""Propositional formulas recursively built from variables using Boolean
operators:

+--------------+--------------+---------------+---------------+--------------+-------------------------+-----------------------------+
| :math:`\top` | :math:`\bot` | :math:`\lnot` | :math:`\land` | :math:`\lor` | :math:`\longrightarrow` | :math:`\longleftrightarrow` |
+--------------+--------------+---------------+---------------+--------------+-------------------------+-----------------------------+
| :class:`_T`  | :class:`_F`  | :class:`Not`  | :class:`And`  | :class:`Or`  | :class:`Implies`        | :class:`Equivalent`         |
+--------------+--------------+---------------+---------------+--------------+-------------------------+-----------------------------+

Conjunctions and disjunctions are n-ary. In contrast to many other
implementations, the constructors do *not* flatten nested conjunctions or
disjunctions. Flattening is a rewrite rule, see :mod:`proprewrite.rules`.

>>> p, q, r = VV.get('p', 'q', 'r')
>>> And(p, And(q, r))
And(p, And(q, r))
>>> print(Implies(p & q, ~r))
p ∧ q → ¬r
"""  # noqa

from __future__ import annotations

from abc import abstractmethod
import functools
from typing import Any, Final, Iterable, Iterator, Mapping, Optional, Self
from typing_extensions import TypeIs

from IPython.lib import pretty

from .support.tracing import trace  # noqa


@functools.total_ordering
class Formula:
    """This abstract base class implements representations of and methods on
    propositional formulas. Arguments are stored in the tuple :attr:`args`.
    Formulas are immutable.
    """

    _hash: Optional[int]

    @property
    def op(self) -> type[Self]:
        """Operator. This property can be used with instances of subclasses of
        :class:`Formula`. It yields the respective subclass.
        """
        return type(self)

    @property
    def args(self) -> tuple[Any, ...]:
        """The arguments of a formula as a tuple.
        """
        return self._args

    @args.setter
    def args(self, args: tuple[Any, ...]) -> None:
        self._args = args

    def __and__(self, other: Formula) -> Formula:
        """Override the :obj:`& <object.__and__>` operator to apply
        :class:`And`. There is no flattening:

        >>> p, q, r = VV.get('p', 'q', 'r')
        >>> p & q & r
        And(And(p, q), r)
        """
        return And(self, other)

    def __eq__(self, other: object) -> bool:
        """A recursive test for structural equality of `self` and `other`.

        Note that this is not a logical operator for equality.

        >>> p, q = VV.get('p', 'q')
        >>> And(p, q) == And(p, q)
        True
        >>> And(p, q) == And(q, p)
        False
        """
        if self is other:
            return True
        if not isinstance(other, Formula):
            return False
        if self.op is not other.op:
            return False
        if hash(self) != hash(other):
            return False
        return self.args == other.args

    def __getnewargs__(self) -> tuple[Any, ...]:
        return self.args

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self.op.__name__, self.args))
        return self._hash

    @abstractmethod
    def __init__(self, *args: object) -> None:
        """This abstract base class is not supposed to have instances itself.
        Technically this is enforced via this abstract initializer.
        """
        self._hash = None

    def __invert__(self) -> Formula:
        """Override the :obj:`~ <object.__invert__>` operator to apply
        :class:`Not`.

        >>> p, = VV.get('p')
        >>> ~ ~ p
        Not(Not(p))
        """
        return Not(self)

    def __le__(self, other: Formula) -> bool:
        """Returns :obj:`True` if `self` should be sorted before or is equal
        to `other`.

        >>> p, q = VV.get('p', 'q')
        >>> sorted([Or(p, q), ~p, q, F, p, T])
        [T, F, p, q, Not(p), Or(p, q)]
        """
        L = (_T, _F, Var, Not, And, Or, Implies, Equivalent)
        if self.op is not other.op:
            return L.index(self.op) < L.index(other.op)
        return self.args <= other.args

    def __lshift__(self, other: Formula) -> Formula:
        r"""Override the :obj:`\<\< <object.__lshift__>` operator to apply
        :class:`Implies` with reversed sides.

        >>> p, q = VV.get('p', 'q')
        >>> p << q
        Implies(q, p)
        """
        return Implies(other, self)

    def __or__(self, other: Formula) -> Formula:
        """Override the :obj:`| <object.__or__>` operator to apply :class:`Or`.
        """
        return Or(self, other)

    def __repr__(self) -> str:
        """A representation of the :class:`Formula` `self` that is suitable
        for use as an input.
        """
        r = self.op.__name__
        r += '('
        if self.args:
            r += self.args[0].__repr__()
            for a in self.args[1:]:
                r += ', ' + a.__repr__()
        r += ')'
        return r

    def __rshift__(self, other: Formula) -> Formula:
        """Override the :obj:`>> <object.__rshift__>` operator to apply
        :class:`Implies`.

        >>> p, q = VV.get('p', 'q')
        >>> p >> q
        Implies(p, q)
        """
        return Implies(self, other)

    def __str__(self) -> str:
        """Representation of the formula used in printing.

        >>> p, q, r = VV.get('p', 'q', 'r')
        >>> print(Or(And(p, ~q), Not(Or(q, r)), Equivalent(p, r)))
        p ∧ ¬q ∨ ¬(q ∨ r) ∨ (p ↔ r)
        """
        SYMBOL: Final = {
            And: '∧', Or: '∨', Implies: '→', Equivalent: '↔', Not: '¬',
            _F: 'F', _T: 'T'}
        PRECEDENCE: Final = {
            And: 50, Or: 40, Implies: 10, Equivalent: 10, Not: 99, _F: 99,
            _T: 99, Var: 99}
        SPACING: Final = ' '
        match self:
            case And() | Or() | Equivalent() | Implies():
                L = []
                for arg in self.args:
                    arg_as_str = str(arg)
                    if PRECEDENCE[self.op] >= PRECEDENCE[arg.op]:
                        arg_as_str = f'({arg_as_str})'
                    L.append(arg_as_str)
                return f'{SPACING}{SYMBOL[self.op]}{SPACING}'.join(L)
            case Not():
                arg_as_str = str(self.arg)
                if self.arg.op not in (Var, Not, _T, _F):
                    arg_as_str = f'({arg_as_str})'
                return f'{SYMBOL[Not]}{arg_as_str}'
            case _F() | _T():
                return SYMBOL[self.op]
            case Var():
                return self.name
            case _:
                assert False, repr(self)

    def as_latex(self) -> str:
        r"""LaTeX representation as a string, which can be used elsewhere.

        >>> p, q = VV.get('p', 'q')
        >>> Implies(p, Or(q, F)).as_latex()
        'p \\, \\longrightarrow \\, q \\, \\vee \\, \\bot'
        >>> Not(And(p, q)).as_latex()
        '\\neg \\, (p \\, \\wedge \\, q)'
        """
        SYMBOL: Final = {
            And: '\\wedge', Or: '\\vee', Implies: '\\longrightarrow',
            Equivalent: '\\longleftrightarrow', Not: '\\neg', _F: '\\bot',
            _T: '\\top'}
        PRECEDENCE: Final = {
            And: 50, Or: 50, Implies: 10, Equivalent: 10, Not: 99, _F: 99,
            _T: 99, Var: 99}
        SPACING: Final = ' \\, '
        match self:
            case And() | Or() | Equivalent() | Implies():
                L = []
                for arg in self.args:
                    arg_as_latex = arg.as_latex()
                    if PRECEDENCE[self.op] >= PRECEDENCE[arg.op]:
                        arg_as_latex = f'({arg_as_latex})'
                    L.append(arg_as_latex)
                return f'{SPACING}{SYMBOL[self.op]}{SPACING}'.join(L)
            case Not():
                arg_as_latex = self.arg.as_latex()
                if self.arg.op not in (Var, Not, _T, _F):
                    arg_as_latex = f'({arg_as_latex})'
                return f'{SYMBOL[Not]}{SPACING}{arg_as_latex}'
            case _F() | _T():
                return SYMBOL[self.op]
            case Var():
                return self.name
            case _:
                assert False, repr(self)

    def atoms(self) -> Iterator[Var]:
        """An iterator over all occurrences of variables in `self`. Recall
        that the truth values :data:`T` and :data:`F` are not atoms:

        >>> p, q = VV.get('p', 'q')
        >>> list(Or(And(p, T), Implies(q, p)).atoms())
        [p, q, p]
        """
        match self:
            case Var():
                yield self
            case _:
                for arg in self.args:
                    yield from arg.atoms()

    def depth(self) -> int:
        """The depth of a formula, where variables and truth values have
        depth 0.

        >>> p, q = VV.get('p', 'q')
        >>> Not(And(p, Or(q, F))).depth()
        3
        """
        match self:
            case Var() | _T() | _F():
                return 0
            case _:
                return 1 + max(arg.depth() for arg in self.args)

    def _repr_pretty_(self, p: pretty.RepresentationPrinter, cycle: bool) -> None:
        assert not cycle
        if isinstance(self, (Var, _T, _F)):
            p.text(repr(self))
            return
        op = self.__class__.__name__
        with p.group(len(op) + 1, op + '(', ')'):
            for idx, arg in enumerate(self.args):
                if idx:
                    p.text(',')
                    p.breakable()
                p.pretty(arg)

    def subs(self, substitution: Mapping[Var, Formula]) -> Formula:
        """Simultaneous substitution of formulas for variables.

        >>> p, q, r = VV.get('p', 'q', 'r')
        >>> Implies(p, And(q, p)).subs({p: q, q: Not(r)})
        Implies(q, And(Not(r), q))
        """
        match self:
            case Var():
                return substitution.get(self, self)
            case _T() | _F():
                return self
            case _:
                return self.op(*(arg.subs(substitution) for arg in self.args))

    @property
    def variable_names(self) -> frozenset[str]:
        """The names of all variables occurring in `self`.
        """
        return frozenset(v.name for v in self.atoms())

    def is_literal(self) -> bool:
        """A literal is a variable or a negated variable.
        """
        return Formula.is_var(self) or (Formula.is_not(self) and Formula.is_var(self.arg))

    def is_cnf(self) -> bool:
        """Test for conjunctive normal form. Truth values count as the empty
        conjunction and the empty disjunction, respectively.

        >>> p, q, r = VV.get('p', 'q', 'r')
        >>> And(Or(p, ~q), r).is_cnf()
        True
        >>> Or(And(p, ~q), r).is_cnf()
        False
        """
        return self._is_bnf(And)

    def is_dnf(self) -> bool:
        """Test for disjunctive normal form, dual to :meth:`is_cnf`.

        >>> p, q, r = VV.get('p', 'q', 'r')
        >>> Or(And(p, ~q), r).is_dnf()
        True
        """
        return self._is_bnf(Or)

    def _is_bnf(self, outer: type[And] | type[Or]) -> bool:
        def is_clause(f: Formula) -> bool:
            if f.is_literal():
                return True
            return isinstance(f, outer.dual()) and all(arg.is_literal() for arg in f.args)

        if Formula.is_true(self) or Formula.is_false(self):
            return True
        if isinstance(self, outer):
            return all(is_clause(arg) for arg in self.args)
        return is_clause(self)

    @staticmethod
    def is_and(f: Formula) -> TypeIs[And]:
        return isinstance(f, And)

    @staticmethod
    def is_and_or(f: Formula) -> TypeIs[AndOr]:
        return isinstance(f, AndOr)

    @staticmethod
    def is_equivalent(f: Formula) -> TypeIs[Equivalent]:
        return isinstance(f, Equivalent)

    @staticmethod
    def is_false(f: Formula) -> TypeIs[_F]:
        return isinstance(f, _F)

    @staticmethod
    def is_implies(f: Formula) -> TypeIs[Implies]:
        return isinstance(f, Implies)

    @staticmethod
    def is_not(f: Formula) -> TypeIs[Not]:
        return isinstance(f, Not)

    @staticmethod
    def is_or(f: Formula) -> TypeIs[Or]:
        return isinstance(f, Or)

    @staticmethod
    def is_true(f: Formula) -> TypeIs[_T]:
        return isinstance(f, _T)

    @staticmethod
    def is_var(f: Formula) -> TypeIs[Var]:
        return isinstance(f, Var)


class Var(Formula):
    """Propositional variables. Variables are identified by their name. In
    general, variables should be obtained from :data:`VV`.

    >>> Var('p') == Var('p')
    True
    """

    def __init__(self, name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError(f'expecting non-empty string as name; {name!r} is {type(name)}')
        super().__init__()
        self.args = (name, )

    def __repr__(self) -> str:
        return self.name

    @property
    def name(self) -> str:
        """The name of the variable.
        """
        return self.args[0]


class VariableSet:
    """The infinite set of all propositional variables. This class is a
    singleton, whose single instance is assigned to :data:`VV`.
    """

    _instance: Optional[VariableSet] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._used = set()
            cls._instance._fresh_index = 0
        return cls._instance

    def __getitem__(self, name: str) -> Var:
        var = Var(name)
        self._used.add(name)
        return var

    def fresh(self, suffix: str = '') -> Var:
        """Return a fresh variable, by default from the sequence G0001, G0002,
        ..., G9999, G10000, ... This naming convention is inspired by Lisp's
        gensym(). Names that have been obtained via :meth:`get` are skipped.

        >>> v = VV.fresh()
        >>> v == VV.fresh()
        False
        """
        while True:
            self._fresh_index += 1
            name = f'G{self._fresh_index:04d}{suffix}'
            if name not in self._used:
                return self[name]

    def get(self, *args: str) -> tuple[Var, ...]:
        """Obtain several variables at once.

        >>> p, q = VV.get('p', 'q')
        >>> Or(p, q)
        Or(p, q)
        """
        return tuple(self[name] for name in args)


VV = VariableSet()
"""The unique instance of :class:`VariableSet`.
"""


class Equivalent(Formula):
    r"""A class whose instances are equivalences in the sense that their
    toplevel operator represents the Boolean operator
    :math:`\longleftrightarrow`. Equality is symmetric:

    >>> p, q = VV.get('p', 'q')
    >>> Equivalent(p, q) == Equivalent(q, p)
    True
    """

    def __init__(self, lhs: Formula, rhs: Formula) -> None:
        super().__init__()
        self.args = (lhs, rhs)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Equivalent):
            return False
        return self.args == other.args or self.args == (other.rhs, other.lhs)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self.op.__name__, frozenset(self.args)))
        return self._hash

    @property
    def lhs(self) -> Formula:
        """The left-hand side of the equivalence.
        """
        return self.args[0]

    @property
    def rhs(self) -> Formula:
        """The right-hand side of the equivalence.
        """
        return self.args[1]


class Implies(Formula):
    r"""A class whose instances are implications in the sense that their
    toplevel operator represents the Boolean operator
    :math:`\longrightarrow`.

    .. seealso::
        * :meth:`>>, __rshift__() <.Formula.__rshift__>` -- \
            infix notation of :class:`Implies`
        * :meth:`\<\<, __lshift__() <.Formula.__lshift__>` -- \
            infix notation of converse :class:`Implies`
    """

    def __init__(self, lhs: Formula, rhs: Formula) -> None:
        super().__init__()
        self.args = (lhs, rhs)

    @property
    def lhs(self) -> Formula:
        """The antecedent of the implication.
        """
        return self.args[0]

    @property
    def rhs(self) -> Formula:
        """The consequent of the implication.
        """
        return self.args[1]


class AndOr(Formula):
    """Common base class of :class:`And` and :class:`Or`. Instances have at
    least two arguments. The order of the arguments is preserved as given.
    """

    is_and: bool
    """:obj:`True` for :class:`And`, :obj:`False` for :class:`Or`.
    """

    def __init__(self, *args: Formula) -> None:
        if len(args) < 2:
            # __new__ has returned args[0], which is already initialized.
            return
        super().__init__()
        self.args = tuple(args)

    def __new__(cls, *args: Formula):
        if cls is AndOr:
            raise TypeError('AndOr is abstract; use And, Or, or and_or()')
        if not args:
            return cls.neutral_element()
        if len(args) == 1:
            return args[0]
        return super().__new__(cls)

    @classmethod
    @abstractmethod
    def dual(cls) -> type[AndOr]:
        ...

    @classmethod
    @abstractmethod
    def definite_element(cls) -> Formula:
        ...

    @classmethod
    @abstractmethod
    def neutral_element(cls) -> Formula:
        ...


class And(AndOr):
    r"""A class whose instances are conjunctions in the sense that their
    toplevel operator represents the Boolean operator :math:`\wedge`.

    >>> p, q, r = VV.get('p', 'q', 'r')
    >>> And()
    T
    >>> And(p)
    p
    >>> And(q, p, And(r, p))
    And(q, p, And(r, p))
    """

    is_and = True

    @classmethod
    def dual(cls) -> type[Or]:
        r"""A class method yielding the class :class:`Or`, which implements
        the dual operator :math:`\vee` of :math:`\wedge`.
        """
        return Or

    @classmethod
    def definite_element(cls) -> _F:
        """A class method yielding :data:`F`, which is the dual of the
        neutral element.
        """
        return _F()

    @classmethod
    def neutral_element(cls) -> _T:
        """A class method yielding :data:`T`.
        """
        return _T()


class Or(AndOr):
    r"""A class whose instances are disjunctions in the sense that their
    toplevel operator represents the Boolean operator :math:`\vee`.

    >>> p, q = VV.get('p', 'q')
    >>> Or()
    F
    >>> Or(p, q, p)
    Or(p, q, p)
    """

    is_and = False

    @classmethod
    def dual(cls) -> type[And]:
        r"""A class method yielding the class :class:`And`, which implements
        the dual operator :math:`\wedge` of :math:`\vee`.
        """
        return And

    @classmethod
    def definite_element(cls) -> _T:
        """A class method yielding :data:`T`, which is the dual of the
        neutral element.
        """
        return _T()

    @classmethod
    def neutral_element(cls) -> _F:
        """A class method yielding :data:`F`.
        """
        return _F()


def and_or(is_and: bool, args: Iterable[Formula]) -> Formula:
    """Build a conjunction if `is_and` is :obj:`True`, else a disjunction.
    There are no singleton conjunctions or disjunctions:

    >>> p, q = VV.get('p', 'q')
    >>> and_or(False, [p, q])
    Or(p, q)
    >>> and_or(True, [p])
    p
    >>> and_or(True, [])
    T
    """
    op = And if is_and else Or
    return op(*args)


class Not(Formula):
    r"""A class whose instances are negated formulas in the sense that their
    toplevel operator is the Boolean operator :math:`\neg`.
    """

    def __init__(self, arg: Formula) -> None:
        super().__init__()
        self.args = (arg, )

    @property
    def arg(self) -> Formula:
        """The one argument of the operator :math:`\\neg`.
        """
        return self.args[0]


class _T(Formula):
    """A singleton class whose sole instance represents the constant formula
    that is always true.

    >>> _T() is _T()
    True
    """

    # This is a quite basic implementation of a singleton class. It does not
    # support subclassing.

    _instance: Optional[_T] = None

    def __init__(self) -> None:
        super().__init__()
        self.args = ()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'T'

    @classmethod
    def dual(cls) -> type[_F]:
        return _F


T = _T()
"""Support use as a constant without parentheses.
"""


class _F(Formula):
    """A singleton class whose sole instance represents the constant formula
    that is always false.

    >>> _F() is _F()
    True
    """

    _instance: Optional[_F] = None

    def __init__(self) -> None:
        super().__init__()
        self.args = ()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'F'

    @classmethod
    def dual(cls) -> type[_T]:
        return _T


F = _F()
"""Support use as a constant without parentheses.
"""
