"""Patterns over propositional formulas. A :class:`FormulaMatcher` mirrors the
shape of a :class:`.Formula` and can contain named references. A successful
match yields a :class:`MatchResult` holding the bindings of those names.

Matching of conjunctions and disjunctions is associative-commutative: the
sub-patterns of an :class:`AndOrMatcher` are assigned to the operands in any
order, and the operands that are not used are collected as the *remainder*.

>>> from proprewrite.formula import And, Or, VV
>>> p, q, r = VV.get('p', 'q', 'r')
>>> result = (A & (A | B)).matches(And(Or(q, p), p))
>>> result['A'], result['B']
(p, q)

Bindings are never mutated. Each step of a match creates a new mapping, so
that a failed attempt during backtracking simply drops its bindings.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from enum import auto, Enum
from typing import Mapping, Optional, Sequence

from .formula import And, AndOr, Equivalent, F, Formula, Implies, Not, Or, T, and_or
from .support.tracing import trace  # noqa


RefMap = Mapping[str, Formula]
"""Bindings of reference names to formulas.
"""


class UnboundReferenceError(KeyError):
    """Raised when a reference name is looked up in a :class:`MatchResult`
    but has not been bound by the matcher. This indicates an error in the
    definition of a rule, where the replacement builder refers to a name that
    does not occur in the matcher.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f'reference {self.name!r} is not bound'


@dataclass(frozen=True)
class MatchResult:
    """The result of a successful match of :attr:`matcher` against
    :attr:`origin`.
    """

    ref_map: RefMap
    """The bindings established by the match.
    """

    origin: Formula
    """The formula that has been matched.
    """

    matcher: FormulaMatcher
    """The matcher that has been used.
    """

    def __getitem__(self, name: str) -> Formula:
        """The formula bound to `name`.

        >>> from proprewrite.formula import VV
        >>> p, = VV.get('p')
        >>> A.matches(p)['B']
        Traceback (most recent call last):
        ...
        proprewrite.matcher.UnboundReferenceError: reference 'B' is not bound
        """
        try:
            return self.ref_map[name]
        except KeyError:
            raise UnboundReferenceError(name) from None


def _bind(ref_map: RefMap, name: str, f: Formula) -> RefMap:
    new_map = dict(ref_map)
    new_map[name] = f
    return new_map


class FormulaMatcher:
    """This abstract base class specifies the interface of all matchers.
    """

    bracket_level: int = 0
    """Used for parenthesizing in :meth:`__str__`.
    """

    @property
    @abstractmethod
    def ref_names(self) -> frozenset[str]:
        """All reference names occurring in `self`.
        """
        ...

    @abstractmethod
    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        """Match `self` against `f` extending the bindings `ref_map`. Returns
        :obj:`None` if there is no match.
        """
        ...

    @abstractmethod
    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        """The unique formula matched by `self` given the bindings `ref_map`,
        or :obj:`None` if that formula is not determined.
        """
        ...

    def requires_specific(self, ref_map: RefMap) -> bool:
        """Determines whether `self` can match only one specific formula given
        the bindings `ref_map`.
        """
        return self.required_formula(ref_map) is not None

    @abstractmethod
    def __str__(self) -> str:
        ...

    def _wrap(self, other: FormulaMatcher) -> str:
        if other.bracket_level >= self.bracket_level and other.bracket_level > 1:
            return f'({other})'
        return str(other)

    def __and__(self, other: FormulaMatcher) -> AndOrMatcher:
        """Override the :obj:`& <object.__and__>` operator to build an
        :class:`AndOrMatcher` for conjunctions. In contrast to formulas,
        patterns are flattened:

        >>> A & B & C
        AndOrMatcher(True, [A, B, C])
        >>> A & (B & C)
        AndOrMatcher(True, [A, B, C])
        """
        return _extend(self, True, other)

    def __or__(self, other: FormulaMatcher) -> AndOrMatcher:
        """Override the :obj:`| <object.__or__>` operator to build an
        :class:`AndOrMatcher` for disjunctions.
        """
        return _extend(self, False, other)

    def __invert__(self) -> NotMatcher:
        """Override the :obj:`~ <object.__invert__>` operator to build a
        :class:`NotMatcher`.
        """
        return NotMatcher(self)

    def __rshift__(self, other: FormulaMatcher) -> BiMatcher:
        """Override the :obj:`>> <object.__rshift__>` operator to build a
        :class:`BiMatcher` for implications.

        >>> print(A >> ~B)
        A → ¬B
        """
        return BiMatcher(BiMatcher.Kind.IMPLIES, self, other)

    def equivalent(self, other: FormulaMatcher) -> BiMatcher:
        """Build a :class:`BiMatcher` for equivalences.
        """
        return BiMatcher(BiMatcher.Kind.EQUIVALENT, self, other)


def _extend(lhs: FormulaMatcher, is_and: bool, rhs: FormulaMatcher) -> AndOrMatcher:
    def operands(m: FormulaMatcher) -> list[FormulaMatcher]:
        if (isinstance(m, AndOrMatcher) and m.is_and == is_and
                and m.remainder is literal(is_and)):
            return list(m.matchers)
        return [m]

    return AndOrMatcher(is_and, operands(lhs) + operands(rhs))


class RefMatcher(FormulaMatcher):
    """Matches any formula and binds it to :attr:`name`. If :attr:`name` is
    already bound, the formula must be structurally equal to the bound one.

    >>> from proprewrite.formula import And, VV
    >>> p, q = VV.get('p', 'q')
    >>> (A & A).matches(And(p, q)) is None
    True
    >>> (A & A).matches(And(q, q)).ref_map
    {'A': q}
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RefMatcher) and self.name == other.name

    def __hash__(self) -> int:
        return hash((RefMatcher, self.name))

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    @property
    def ref_names(self) -> frozenset[str]:
        return frozenset({self.name})

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        if self.name in ref_map:
            if f == ref_map[self.name]:
                return MatchResult(ref_map, f, self)
            return None
        return MatchResult(_bind(ref_map, self.name, f), f, self)

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        return ref_map.get(self.name)


def ref(name: str) -> RefMatcher:
    """Named wildcard.
    """
    return RefMatcher(name)


A = ref('A')
B = ref('B')
C = ref('C')


class TrueMatcher(FormulaMatcher):
    """A singleton class whose sole instance :data:`TM` matches only
    :data:`.T`. It does not bind any name.
    """

    _instance: Optional[TrueMatcher] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'TM'

    def __str__(self) -> str:
        return 'T'

    @property
    def ref_names(self) -> frozenset[str]:
        return frozenset()

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        if f is not T:
            return None
        return MatchResult(ref_map, f, self)

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        return T


TM = TrueMatcher()


class FalseMatcher(FormulaMatcher):
    """A singleton class whose sole instance :data:`FM` matches only
    :data:`.F`. It does not bind any name.
    """

    _instance: Optional[FalseMatcher] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'FM'

    def __str__(self) -> str:
        return 'F'

    @property
    def ref_names(self) -> frozenset[str]:
        return frozenset()

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        if f is not F:
            return None
        return MatchResult(ref_map, f, self)

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        return F


FM = FalseMatcher()


def literal(is_and: bool) -> TrueMatcher | FalseMatcher:
    """The matcher for the neutral element of conjunction if `is_and` is
    :obj:`True`, else of disjunction.
    """
    return TM if is_and else FM


class TypedMatcher(FormulaMatcher):
    """Like :class:`RefMatcher` but binds :attr:`name` only to instances of
    :attr:`op`, which is :class:`.And`, :class:`.Or`, or :class:`.AndOr` for
    both. If :attr:`arity` is not :obj:`None`, the number of arguments must
    equal :attr:`arity`. This allows to capture a conjunction or disjunction
    as a unit.

    >>> from proprewrite.formula import And, Or, VV
    >>> p, q, r = VV.get('p', 'q', 'r')
    >>> TypedMatcher('X', arity=2).matches(Or(p, q, r)) is None
    True
    >>> TypedMatcher('X', op=Or).matches(Or(p, q, r))['X']
    Or(p, q, r)
    """

    def __init__(self, name: str, arity: Optional[int] = None,
                 op: type[AndOr] = AndOr) -> None:
        if arity is not None and arity < 2:
            raise ValueError(f'arity must be at least 2; {arity=}')
        if op not in (And, Or, AndOr):
            raise ValueError(f'op must be And, Or, or AndOr; {op=}')
        self.name = name
        self.arity = arity
        self.op = op

    def __repr__(self) -> str:
        return f'TypedMatcher({self.name!r}, arity={self.arity}, op={self.op.__name__})'

    def __str__(self) -> str:
        return self.name

    @property
    def ref_names(self) -> frozenset[str]:
        return frozenset({self.name})

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        if self.name in ref_map:
            if f == ref_map[self.name]:
                return MatchResult(ref_map, f, self)
            return None
        if not isinstance(f, self.op):
            return None
        if self.arity is not None and len(f.args) != self.arity:
            return None
        return MatchResult(_bind(ref_map, self.name, f), f, self)

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        return ref_map.get(self.name)


class NotMatcher(FormulaMatcher):

    bracket_level = 1

    def __init__(self, arg: FormulaMatcher) -> None:
        self.arg = arg

    def __repr__(self) -> str:
        return f'NotMatcher({self.arg!r})'

    def __str__(self) -> str:
        return f'¬{self._wrap(self.arg)}'

    @property
    def ref_names(self) -> frozenset[str]:
        return self.arg.ref_names

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        if not isinstance(f, Not):
            return None
        result = self.arg.matches(f.arg, ref_map)
        if result is None:
            return None
        return MatchResult(result.ref_map, f, self)

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        arg = self.arg.required_formula(ref_map)
        if arg is None:
            return None
        return Not(arg)


class BiMatcher(FormulaMatcher):
    """Matches implications and equivalences. For implications, :attr:`lhs`
    must match the antecedent and :attr:`rhs` the consequent. Equivalences
    are symmetric, so both assignments of the sides are tried:

    >>> from proprewrite.formula import Equivalent, Not, VV
    >>> p, q = VV.get('p', 'q')
    >>> A.equivalent(~B).matches(Equivalent(Not(p), q)).ref_map
    {'A': q, 'B': p}
    """

    class Kind(Enum):
        IMPLIES = auto()
        EQUIVALENT = auto()

    bracket_level = 3

    def __init__(self, kind: BiMatcher.Kind, lhs: FormulaMatcher, rhs: FormulaMatcher) -> None:
        self.kind = kind
        self.lhs = lhs
        self.rhs = rhs

    def __repr__(self) -> str:
        return f'BiMatcher({self.kind}, {self.lhs!r}, {self.rhs!r})'

    def __str__(self) -> str:
        symbol = '→' if self.kind is BiMatcher.Kind.IMPLIES else '↔'
        return f'{self._wrap(self.lhs)} {symbol} {self._wrap(self.rhs)}'

    @property
    def ref_names(self) -> frozenset[str]:
        return self.lhs.ref_names | self.rhs.ref_names

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        match self.kind, f:
            case BiMatcher.Kind.IMPLIES, Implies():
                new_map = self._match_pair(f.lhs, f.rhs, ref_map)
            case BiMatcher.Kind.EQUIVALENT, Equivalent():
                new_map = self._match_pair(f.lhs, f.rhs, ref_map)
                if new_map is None:
                    new_map = self._match_pair(f.rhs, f.lhs, ref_map)
            case _:
                return None
        if new_map is None:
            return None
        return MatchResult(new_map, f, self)

    def _match_pair(self, lhs: Formula, rhs: Formula, ref_map: RefMap) -> Optional[RefMap]:
        result = self.lhs.matches(lhs, ref_map)
        if result is None:
            return None
        result = self.rhs.matches(rhs, result.ref_map)
        if result is None:
            return None
        return result.ref_map

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        lhs = self.lhs.required_formula(ref_map)
        if lhs is None:
            return None
        rhs = self.rhs.required_formula(ref_map)
        if rhs is None:
            return None
        if self.kind is BiMatcher.Kind.IMPLIES:
            return Implies(lhs, rhs)
        return Equivalent(lhs, rhs)


class AndOrMatcher(FormulaMatcher):
    """Associative-commutative matching of conjunctions (`is_and` is
    :obj:`True`) or disjunctions. Each matcher in :attr:`matchers` is assigned
    to a different argument of the formula. The arguments that are left over
    form the remainder, which must match :attr:`remainder`:

    * if no argument is left over, the remainder is the neutral element,
      :data:`.T` or :data:`.F`;
    * if one argument is left over, the remainder is that argument;
    * otherwise, the remainder is the conjunction or disjunction of the
      arguments left over, in their original order.

    By default, :attr:`remainder` matches only the neutral element, so that
    the matchers must cover all arguments.

    >>> from proprewrite.formula import And, Not, VV
    >>> p, q, r = VV.get('p', 'q', 'r')
    >>> m = AndOrMatcher(True, [A, ~A], remainder=ref('R'))
    >>> m.matches(And(q, Not(p), r, p))['R']
    And(q, r)
    """

    bracket_level = 2

    def __init__(self, is_and: bool, matchers: Sequence[FormulaMatcher],
                 remainder: Optional[FormulaMatcher] = None) -> None:
        self.is_and = is_and
        self.matchers = tuple(matchers)
        self.remainder = literal(is_and) if remainder is None else remainder

    def __repr__(self) -> str:
        r = f'AndOrMatcher({self.is_and}, {list(self.matchers)!r}'
        if self.remainder is not literal(self.is_and):
            r += f', remainder={self.remainder!r}'
        return r + ')'

    def __str__(self) -> str:
        symbol = ' ∧ ' if self.is_and else ' ∨ '
        L = [self._wrap(m) for m in self.matchers]
        if self.remainder is not literal(self.is_and):
            L.append(self._wrap(self.remainder))
        return symbol.join(L)

    @property
    def ref_names(self) -> frozenset[str]:
        names = self.remainder.ref_names
        for m in self.matchers:
            names = names | m.ref_names
        return names

    def matches(self, f: Formula, ref_map: RefMap = {}) -> Optional[MatchResult]:
        if not isinstance(f, AndOr) or f.is_and != self.is_and:
            return None
        new_map = self._assign(0, f.args, ref_map)
        if new_map is None:
            return None
        return MatchResult(new_map, f, self)

    def _assign(self, index: int, unused: tuple[Formula, ...], ref_map: RefMap) \
            -> Optional[RefMap]:
        """Assign ``self.matchers[index:]`` to arguments in `unused` and
        finally match the remainder. Backtracks over all choices, including
        those that lead to a remainder that does not match.
        """
        if index == len(self.matchers):
            result = self.remainder.matches(and_or(self.is_and, unused), ref_map)
            if result is None:
                return None
            return result.ref_map
        matcher = self.matchers[index]
        for i, arg in enumerate(unused):
            result = matcher.matches(arg, ref_map)
            if result is None:
                continue
            new_map = self._assign(index + 1, unused[:i] + unused[i + 1:], result.ref_map)
            if new_map is not None:
                return new_map
        return None

    def required_formula(self, ref_map: RefMap) -> Optional[Formula]:
        # The order of the arguments of a matched formula is not determined.
        return None
