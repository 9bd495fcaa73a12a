__version__ = 0.1

___author___ = 'The proprewrite developers'
___copyright__ = 'Copyright 2026, the proprewrite developers'
___license__ = 'BSD-2-Clause'
___status__ = 'Prototype'

from .formula import (Formula, Var, VV, Equivalent, Implies, AndOr, And,  # noqa
                      Or, Not, T, F, and_or)

from .matcher import (FormulaMatcher, MatchResult, RefMap,  # noqa
                      UnboundReferenceError, ref, A, B, C, TM, FM)

from .rule import (Rule, MatcherRule, FlattenRule, RuleNotApplicableError,  # noqa
                   rule, simple_rule, wrap_and_or)

from .rewrite import (Options, Rewrite, RewriteNotConverged,  # noqa
                      SimplificationStep, simplify, simplify_with_steps,
                      to_cnf, to_dnf)

from .truth import (UnassignedVariableError, evaluate, is_contradiction,  # noqa
                    is_satisfiable, is_tautology, to_full_dnf,
                    truth_assignments, truth_table, value_equals)

__all__ = [
    'Formula', 'Var', 'VV', 'Equivalent', 'Implies', 'AndOr', 'And', 'Or',
    'Not', 'T', 'F', 'and_or',

    'FormulaMatcher', 'MatchResult', 'RefMap', 'UnboundReferenceError',
    'ref', 'A', 'B', 'C', 'TM', 'FM',

    'Rule', 'MatcherRule', 'FlattenRule', 'RuleNotApplicableError', 'rule',
    'simple_rule', 'wrap_and_or',

    'Options', 'Rewrite', 'RewriteNotConverged', 'SimplificationStep',
    'simplify', 'simplify_with_steps', 'to_cnf', 'to_dnf',

    'UnassignedVariableError', 'evaluate', 'is_contradiction',
    'is_satisfiable', 'is_tautology', 'to_full_dnf', 'truth_assignments',
    'truth_table', 'value_equals'
]
