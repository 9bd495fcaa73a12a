"""This module :mod:`proprewrite.rewrite` provides a callable class that
rewrites formulas with a catalog of rules until no rule applies anymore, and
the user interface functions :func:`simplify`, :func:`to_cnf`,
:func:`to_dnf`, and :func:`simplify_with_steps` based on the catalogs in
:mod:`.rules`.

>>> from proprewrite.formula import And, Implies, Not, Or, VV
>>> p, q = VV.get('p', 'q')
>>> simplify(And(p, Or(p, q)))
p
>>> simplify(And(Implies(p, q), Implies(p, Not(q))))
Not(p)
>>> to_cnf(Or(And(p, q), Not(p)))
Or(Not(p), q)
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Iterable, Optional

from .formula import F, Formula, T, Var
from .rule import Rule
from .rules import BASIC_RULES, CNF_RULES, DNF_RULES, FLATTEN_AND_OR
from .support.excepthook import NoTraceException
from .support.logging import DeltaTimeFormatter, RateFilter, Timer
from .support.tracing import trace  # noqa

# Create logger
delta_time_formatter = DeltaTimeFormatter(
    f'%(asctime)s - %(name)s - %(levelname)-5s - %(delta)s: %(message)s')

stream_handler = logging.StreamHandler()
stream_handler.setFormatter(delta_time_formatter)

logger = logging.getLogger(__name__)
logger.propagate = False
logger.addHandler(stream_handler)
logger.addFilter(lambda record: record.msg.strip() != '')
logger.setLevel(logging.WARNING)

# Create progress logger
rate_filter = RateFilter()

progress_logger = logging.getLogger(f'{__name__}.progress')
progress_logger.propagate = False
progress_logger.addHandler(stream_handler)
progress_logger.addFilter(rate_filter)
progress_logger.setLevel(logging.WARNING)


class RewriteNotConverged(NoTraceException):
    """Raised when a rewrite has not reached a formula to which no rule
    applies within :attr:`Options.max_steps` steps. The formula reached so
    far and the steps taken are available as :attr:`partial_result` and
    :attr:`steps`.
    """

    def __init__(self, max_steps: int, partial_result: Formula,
                 steps: list[SimplificationStep]) -> None:
        super().__init__(f'no fixpoint reached within {max_steps} steps')
        self.partial_result = partial_result
        self.steps = steps


@dataclass(frozen=True)
class SimplificationStep:
    """A single application of :attr:`rule` within a rewrite.

    >>> from proprewrite.formula import Not, VV
    >>> from proprewrite.rules import DOUBLE_NEGATION
    >>> p, = VV.get('p')
    >>> step = SimplificationStep(DOUBLE_NEGATION, Not(Not(p)), p, p)
    >>> print(step)
    Double Negative: ¬¬p ⇒ p
    """

    rule: Rule
    """The rule that has been applied.
    """

    origin: Formula
    """The subformula to which :attr:`rule` has been applied.
    """

    replacement: Formula
    """The replacement of :attr:`origin` computed by :attr:`rule`.
    """

    result: Formula
    """The entire formula after the step.
    """

    def __str__(self) -> str:
        return f'{self.rule.name}: {self.origin} ⇒ {self.replacement}'


@dataclass
class Options:
    """This class holds options that can be provided to
    :meth:`.Rewrite.__call__`.

    >>> Options(max_steps=0)
    Traceback (most recent call last):
    ...
    ValueError: max_steps must be positive; max_steps=0
    """

    max_steps: int = 10000
    """The maximal number of rule applications. There is no proof that the
    catalogs in :mod:`.rules` terminate on all inputs.
    """

    flatten_eagerly: bool = False
    """If :obj:`True`, flatten nested conjunctions and disjunctions after each
    step before any other rule is tried. Otherwise, flattening is one rule in
    the catalog among others.
    """

    log_level: int = logging.NOTSET
    """The `log_level` of the logger used by :class:`.Rewrite`.
    """

    log_rate: float = 0.5
    """The minimal timespan (in s) between two progress outputs.
    """

    def __post_init__(self) -> None:
        if self.max_steps < 1:
            raise ValueError(f'max_steps must be positive; max_steps={self.max_steps}')


@dataclass
class Rewrite:
    """A callable class that rewrites formulas with :attr:`rules`. In each
    step, the nodes of the formula are visited top-down and left to right,
    and the rules are tried in their order at each node. The first
    replacement found is substituted, and the next step starts again at the
    root.
    """

    # Attribute group 1 - arguments of :meth:`.__init__` and :meth:`.__call__`:

    rules: tuple[Rule, ...]
    """The catalog of rules.
    """

    options: Optional[Options] = None
    """The options that have been passed to :meth:`.__call__`.
    """

    # Attribute group 2 - state of the computation:

    result: Optional[Formula] = None
    """The final result as returned by :meth:`.__call__`.
    """

    steps: list[SimplificationStep] = field(default_factory=list)
    """The steps performed by the last call, in their order.
    """

    # Attribute group 3 - timings; all times are wall times in seconds:

    time_total: Optional[float] = None
    """The total time spent in :meth:`.__call__`.
    """

    def __call__(self, f: Formula, **options) -> Formula:
        """The entry point of the callable class :class:`.Rewrite`.

        :param f:
          The input formula.

        :param `**options`:
          Keyword arguments with keywords corresponding to attributes of
          :class:`.Options`.

        :returns:
          A formula equivalent to `f` to which no rule in :attr:`rules`
          applies.

        :raises RewriteNotConverged:
          If :attr:`Options.max_steps` steps did not suffice.
        """
        timer = Timer()
        delta_time_formatter.set_reference_time(time.time())
        Rewrite.__init__(self, self.rules)
        self.options = Options(**options)
        save_level = logger.getEffectiveLevel()
        save_progress_level = progress_logger.getEffectiveLevel()
        try:
            logger.setLevel(self.options.log_level)
            progress_logger.setLevel(self.options.log_level)
            rate_filter.set_rate(self.options.log_rate)
            logger.info(f'{self.options}')
            result = self.rewrite(f)
            logger.info(f'finished after {len(self.steps)} steps')
        except KeyboardInterrupt:
            logger.info('keyboard interrupt')
            raise NoTraceException('KeyboardInterrupt')
        finally:
            logger.setLevel(save_level)
            progress_logger.setLevel(save_progress_level)
        self.result = result
        self.time_total = timer.get()
        return result

    def rewrite(self, f: Formula) -> Formula:
        assert self.options is not None
        if self.options.flatten_eagerly:
            f = self.flatten(f)
        while True:
            step = self.step(f, self.rules)
            if step is None:
                return f
            f = step.result
            if self.options.flatten_eagerly:
                f = self.flatten(f)

    def flatten(self, f: Formula) -> Formula:
        """Apply :data:`.FLATTEN_AND_OR` to `f` until it does not apply
        anywhere in `f`. The steps are recorded like all other steps.
        """
        while True:
            step = self.step(f, (FLATTEN_AND_OR,))
            if step is None:
                return f
            f = step.result

    def step(self, f: Formula, rules: Iterable[Rule]) -> Optional[SimplificationStep]:
        """Perform a single step on `f` and record it in :attr:`steps`.
        Returns :obj:`None` if no rule applies anywhere in `f`.
        """
        assert self.options is not None
        rules = tuple(rules)
        found = self._apply_first(f, rules)
        if found is None:
            return None
        if len(self.steps) == self.options.max_steps:
            raise RewriteNotConverged(self.options.max_steps, f, self.steps)
        rule, origin, replacement, result = found
        step = SimplificationStep(rule, origin, replacement, result)
        self.steps.append(step)
        logger.debug('%s', step)
        if progress_logger.isEnabledFor(logging.INFO):
            progress_logger.info('%s steps, depth %s', len(self.steps), result.depth())
        return step

    def _apply_first(self, f: Formula, rules: tuple[Rule, ...]) \
            -> Optional[tuple[Rule, Formula, Formula, Formula]]:
        """Find the first node of `f` to which one of `rules` applies. Returns
        the rule, the node, its replacement, and `f` with the node replaced.
        """
        for rule in rules:
            replacement = rule.try_apply(f)
            if replacement is not None:
                return rule, f, replacement, replacement
        if isinstance(f, Var) or f is T or f is F:
            return None
        for i, arg in enumerate(f.args):
            found = self._apply_first(arg, rules)
            if found is not None:
                rule, origin, replacement, new_arg = found
                args = f.args[:i] + (new_arg,) + f.args[i + 1:]
                return rule, origin, replacement, f.op(*args)
        return None


def simplify(f: Formula, **options) -> Formula:
    """Simplify `f` with the rules in :data:`.BASIC_RULES`. Each call uses its
    own :class:`Rewrite`, so that calls may be nested, e.g., within
    replacement builders.
    """
    return Rewrite(BASIC_RULES)(f, **options)


def to_cnf(f: Formula, **options) -> Formula:
    """Convert `f` into conjunctive normal form with the rules in
    :data:`.CNF_RULES`.
    """
    return Rewrite(CNF_RULES)(f, **options)


def to_dnf(f: Formula, **options) -> Formula:
    """Convert `f` into disjunctive normal form with the rules in
    :data:`.DNF_RULES`.
    """
    return Rewrite(DNF_RULES)(f, **options)


def simplify_with_steps(f: Formula, **options) -> tuple[Formula, list[SimplificationStep]]:
    """Simplify `f` like :func:`simplify`, and return the result together with
    the steps performed.

    >>> from proprewrite.formula import Or, Not, VV
    >>> p, = VV.get('p')
    >>> result, steps = simplify_with_steps(Not(Or(p, Not(p))))
    >>> result
    F
    >>> for step in steps:
    ...     print(step)
    DeMorgan: ¬(p ∨ ¬p) ⇒ ¬p ∧ ¬¬p
    Contradiction: ¬p ∧ ¬¬p ⇒ F
    """
    rewrite = Rewrite(BASIC_RULES)
    result = rewrite(f, **options)
    return result, rewrite.steps
