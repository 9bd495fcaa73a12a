"""Tests for rules, the remainder wrapping of rules on conjunctions and
disjunctions, and soundness of the rule catalogs."""

import pytest

from proprewrite.formula import And, Equivalent, F, Implies, Not, Or, T, VV
from proprewrite.matcher import A, AndOrMatcher, B, TM, UnboundReferenceError
from proprewrite.rule import (
    FlattenRule, MatcherRule, RuleNotApplicableError, fresh_ref_name, rule,
    simple_rule, wrap_and_or)
from proprewrite.rules import (
    ABSORPTION_AND, ABSORPTION_OR, ABSURDITY, BASIC_RULES, CNF_RULES,
    CONTRADICTION, DE_MORGAN, DISTRIBUTION_AND, DISTRIBUTION_OR, DNF_RULES,
    DOUBLE_NEGATION, EQUIVALENCE_ELIMINATION, EXCLUDED_MIDDLE, FLATTEN_AND_OR,
    IDENTITY_AND, IDENTITY_LAW_AND, IDENTITY_LAW_OR, IDENTITY_OR,
    IMPLICATION_ELIMINATION, NOT_FALSE, NOT_TRUE, ZERO_LAW_AND, ZERO_LAW_OR)
from proprewrite.truth import value_equals

p, q, r = VV.get('p', 'q', 'r')

ALL_RULES = BASIC_RULES + (DISTRIBUTION_OR, DISTRIBUTION_AND)

SAMPLES = [
    And(And(p, q), r), Or(p, Or(q, r)), And(p, And(q, Or(r, Or(p, q)))),
    Not(Not(p)), Not(T), Not(F),
    And(p, q, p), Or(q, p, q),
    And(p, Or(q, p)), And(r, Or(p, q, r), q),
    Or(p, And(p, q)), Or(q, And(r, p, q)),
    Or(p, T, q), And(q, F), And(p, T, q), Or(F, r),
    Or(p, q, Not(p)), And(Not(q), r, q),
    Implies(p, And(q, r)), Equivalent(p, Not(q)),
    And(Implies(p, q), Implies(p, Not(q))),
    And(r, Implies(p, q), Implies(p, Not(q))),
    Not(And(p, q, r)), Not(Or(p, Not(q))),
    Or(And(p, q), r), Or(r, And(p, q, Not(r)), q),
    And(Or(p, q), r), And(r, Or(p, Not(q)), q),
]


class TestSoundness:

    @pytest.mark.parametrize('rule_', ALL_RULES, ids=lambda rule_: rule_.name)
    def test_replacements_are_equivalent(self, rule_):
        applied = 0
        for f in SAMPLES:
            replacement = rule_.try_apply(f)
            if replacement is None:
                continue
            applied += 1
            assert value_equals(f, replacement), f'{rule_.name}: {f} ⇒ {replacement}'
        assert applied > 0


class TestReplacements:

    @pytest.mark.parametrize('rule_, f, expected', [
        (FLATTEN_AND_OR, And(And(p, q), r), And(p, q, r)),
        (FLATTEN_AND_OR, And(And(p, And(q, r)), r), And(p, And(q, r), r)),
        (DOUBLE_NEGATION, Not(Not(p)), p),
        (NOT_TRUE, Not(T), F),
        (NOT_FALSE, Not(F), T),
        (IDENTITY_AND, And(p, q, p), And(q, p)),
        (IDENTITY_OR, Or(p, p), p),
        (ABSORPTION_AND, And(p, Or(q, p)), p),
        (ABSORPTION_AND, And(r, Or(p, q, r), q), And(q, r)),
        (ABSORPTION_OR, Or(p, And(p, q)), p),
        (ZERO_LAW_OR, Or(p, T), T),
        (ZERO_LAW_AND, And(F, q), F),
        (IDENTITY_LAW_AND, And(p, T), p),
        (IDENTITY_LAW_AND, And(q, T, p), And(p, q)),
        (IDENTITY_LAW_OR, Or(F, r), r),
        (EXCLUDED_MIDDLE, Or(p, Not(p)), T),
        (CONTRADICTION, And(q, Not(p), r, p), And(And(q, r), F)),
        (IMPLICATION_ELIMINATION, Implies(p, q), Or(Not(p), q)),
        (EQUIVALENCE_ELIMINATION, Equivalent(p, Not(q)),
         And(Implies(p, Not(q)), Implies(Not(q), p))),
        (ABSURDITY, And(Implies(p, q), Implies(p, Not(q))), Not(p)),
        (DE_MORGAN, Not(And(p, q, r)), Or(Not(p), Not(q), Not(r))),
        (DE_MORGAN, Not(Or(p, Not(q))), And(Not(p), Not(Not(q)))),
        (DISTRIBUTION_OR, Or(And(p, q), r), And(Or(r, p), Or(r, q))),
        (DISTRIBUTION_AND, And(Or(p, q), r), Or(And(r, p), And(r, q))),
        (DISTRIBUTION_AND, And(q, Or(p, r), Not(p)),
         And(Not(p), Or(And(q, p), And(q, r)))),
    ])
    def test_apply(self, rule_, f, expected):
        assert rule_.apply(f) == expected

    @pytest.mark.parametrize('rule_, f', [
        (DOUBLE_NEGATION, Not(p)),
        (IDENTITY_AND, And(p, q)),
        (ABSORPTION_AND, And(p, Or(q, r))),
        (EXCLUDED_MIDDLE, Or(p, Not(q))),
        (DE_MORGAN, Not(p)),
        (DISTRIBUTION_OR, Or(p, q)),
        (FLATTEN_AND_OR, Or(And(p, q), r)),
    ])
    def test_not_applicable(self, rule_, f):
        assert not rule_.matches(f)
        assert rule_.try_apply(f) is None
        assert rule_(f) is None
        with pytest.raises(RuleNotApplicableError) as excinfo:
            rule_.apply(f)
        assert excinfo.value.rule is rule_
        assert excinfo.value.formula == f
        assert isinstance(excinfo.value, ValueError)


class TestDisplay:

    @pytest.mark.parametrize('rule_, expected', [
        (DOUBLE_NEGATION, 'Double Negative:  ¬¬A ⇒ A'),
        (IDENTITY_AND, 'Identity:And:  A ∧ A ⇒ A'),
        (ABSORPTION_AND, 'Absorption:And:  A ∧ (A ∨ B) ⇒ A'),
        (ABSORPTION_OR, 'Absorption:Or:  A ∨ (A ∧ B) ⇒ A'),
        (ZERO_LAW_AND, 'Zero Law:  A ∧ F ⇒ F'),
        (IDENTITY_LAW_AND, 'Identity Law:  A ∧ T ⇒ A'),
        (IDENTITY_LAW_OR, 'Identity Law:  A ∨ F ⇒ A'),
        (EXCLUDED_MIDDLE, 'Excluded Middle:  A ∨ ¬A ⇒ T'),
        (IMPLICATION_ELIMINATION, 'Imply Equal:  A → B ⇒ ¬A ∨ B'),
        (EQUIVALENCE_ELIMINATION, 'Equivalence Equal:  A ↔ B ⇒ (A → B) ∧ (B → A)'),
        (ABSURDITY, 'Absurdity:  (A → B) ∧ (A → ¬B) ⇒ ¬A'),
        (DISTRIBUTION_OR, 'Distribution:  (B ∧ C) ∨ A ⇒ (A ∨ B) ∧ (A ∨ C)'),
    ])
    def test_str(self, rule_, expected):
        assert str(rule_) == expected


class TestCatalogs:

    def test_basic_rules(self):
        assert isinstance(BASIC_RULES, tuple)
        assert len(BASIC_RULES) == 18
        assert BASIC_RULES[0] is FLATTEN_AND_OR
        assert BASIC_RULES[-1] is DE_MORGAN

    def test_normal_form_rules_extend_basic_rules(self):
        assert CNF_RULES == BASIC_RULES + (DISTRIBUTION_OR,)
        assert DNF_RULES == BASIC_RULES + (DISTRIBUTION_AND,)


class TestRuleBuilding:

    def test_rule_wraps_and_or_matchers(self):
        rule_ = rule('test', A & B, lambda result: Or(result['A'], result['B']))
        assert isinstance(rule_, MatcherRule)
        assert len(rule_.matcher.ref_names) == 3
        assert rule_.apply(And(p, q)) == Or(p, q)
        assert rule_.apply(And(p, q, r)) == And(r, Or(p, q))

    def test_rule_does_not_wrap_other_matchers(self):
        rule_ = rule('test', ~A, lambda result: result['A'])
        assert rule_.matcher.ref_names == frozenset({'A'})

    def test_wrap_and_or_keeps_explicit_remainder(self):
        matcher = AndOrMatcher(True, [A], remainder=B)
        rule_ = wrap_and_or('test', matcher, lambda result: result['B'])
        assert rule_.matcher is matcher
        assert rule_.apply(And(p, q, r)) == And(q, r)

    def test_remainder_names_are_fresh(self):
        rule_1 = wrap_and_or('test', A & TM, lambda result: result['A'])
        rule_2 = wrap_and_or('test', A & TM, lambda result: result['A'])
        names_1 = rule_1.matcher.ref_names - {'A'}
        names_2 = rule_2.matcher.ref_names - {'A'}
        assert len(names_1) == len(names_2) == 1
        assert names_1 != names_2

    def test_fresh_ref_name_avoids_given_names(self):
        name = fresh_ref_name()
        index = int(name[1:5])
        avoid = frozenset({f'G{index + 1:04d}_remainder'})
        assert fresh_ref_name(avoid) == f'G{index + 2:04d}_remainder'

    def test_generated_symbol_representation(self):
        rule_ = simple_rule('test', A >> B, lambda result: Or(Not(result['A']), result['B']))
        assert rule_.symbol_representation == 'A → B ⇒ ¬A ∨ B'
        rule_ = simple_rule('test', A, lambda result: result['A'], symbol='given')
        assert str(rule_) == 'test:  given'

    def test_builder_with_unbound_reference(self):
        with pytest.raises(UnboundReferenceError):
            simple_rule('test', A, lambda result: result['B'])
        rule_ = simple_rule('test', A, lambda result: result['B'], symbol='A ⇒ B')
        with pytest.raises(UnboundReferenceError):
            rule_.apply(p)

    def test_flatten_rule(self):
        assert FlattenRule().apply(Or(p, Or(q, r))) == Or(p, q, r)
        assert str(FlattenRule()).startswith('Flatten And/Or:  ')
