"""Tests for criterion checks and the check-ratio formula."""

import pytest

from models.criteria import Criteria, Weights
from models.matching import MatchCandidate
from services.scenario.base import round_percentage
from services.scenario.check_ratio import CheckRatioStrategy
from services.scenario.checks import build_checks, evaluate


def _candidate(score=50, **fields):
    return MatchCandidate.model_validate({"id": "x", "matchPercentage": score, **fields})


def _names(criteria, server_rules=True):
    return [check.name for check in build_checks(criteria, server_rules)]


class TestRoundPercentage:
    def test_half_up(self):
        assert round_percentage(1, 8) == 13
        assert round_percentage(1, 3) == 33
        assert round_percentage(2, 3) == 67
        assert round_percentage(1, 2) == 50

    def test_no_applicable_checks(self):
        assert round_percentage(0, 0) == 100


class TestBuildChecks:
    def test_defaults(self):
        names = _names(Criteria())
        assert len(names) == 16
        assert "academics.degree_level" not in names
        assert "lifestyle.country" not in names
        assert "lifestyle.city" in names
        assert "interests" not in names

    def test_client_rules_drop_any_city(self):
        names = _names(Criteria(), server_rules=False)
        assert len(names) == 15
        assert "lifestyle.city" not in names

    def test_test_policy_ignored_under_server_rules(self):
        criteria = Criteria()
        criteria.admissions.filters.test_policy = "SAT"
        assert "admissions.test_policy" not in _names(criteria)
        assert "admissions.test_policy" in _names(criteria, server_rules=False)

    def test_disabled_sections_add_nothing(self):
        criteria = Criteria()
        for section in criteria.sections.values():
            section.enabled = False
        assert _names(criteria) == []

    def test_any_means_no_filter(self):
        criteria = Criteria()
        criteria.lifestyle.filters.city = "Any"
        criteria.lifestyle.filters.country = "Canada"
        names = _names(criteria, server_rules=False)
        assert "lifestyle.country" in names
        assert "lifestyle.city" not in names

    def test_optional_checks(self):
        criteria = Criteria(interests=["Engineering"])
        criteria.academics.filters.languages = ["English"]
        criteria.financials.filters.need_blind = True
        criteria.admissions.filters.test_policy = "test-blind"
        names = _names(criteria, server_rules=False)
        assert {"interests", "academics.languages", "financials.need_blind", "admissions.test_policy"} <= set(names)


class TestEvaluate:
    def test_missing_data_is_skipped(self):
        outcomes = evaluate(build_checks(Criteria()), _candidate())
        assert outcomes == []

    def test_alternate_field_names(self):
        candidate = _candidate(gpa_requirement=3.2, tuition_international=70000)
        outcomes = {check.name: ok for check, ok in evaluate(build_checks(Criteria()), candidate)}
        assert outcomes == {"academics.min_gpa": True, "financials.max_budget": False}

    def test_string_match_is_case_insensitive(self):
        criteria = Criteria()
        criteria.lifestyle.filters.country = "canada"
        outcomes = evaluate(build_checks(criteria), _candidate(location_country=" Canada "))
        assert [ok for _, ok in outcomes] == [True]

    def test_lists_must_contain_every_target(self):
        criteria = Criteria(interests=["engineering", "arts"])
        passing = _candidate(focus_areas=["Engineering", "Arts", "Law"])
        failing = _candidate(interests=["Engineering"])
        checks = build_checks(criteria)
        assert evaluate(checks, passing)[0][1] is True
        assert evaluate(checks, failing)[0][1] is False

    @pytest.mark.parametrize(
        "policy, tests, expected",
        [
            ("test-blind", [], True),
            ("test-blind", ["SAT"], False),
            ("required", ["SAT"], True),
            ("SAT", ["sat", "act"], True),
            ("ACT", ["SAT"], False),
        ],
    )
    def test_test_policy(self, policy, tests, expected):
        criteria = Criteria()
        criteria.admissions.filters.test_policy = policy
        checks = [
            c for c in build_checks(criteria, server_rules=False) if c.name == "admissions.test_policy"
        ]
        assert evaluate(checks, _candidate(required_tests=tests))[0][1] is expected

    def test_booleans_are_not_numbers(self):
        outcomes = evaluate(build_checks(Criteria()), _candidate(min_gpa=True))
        assert outcomes == []


class TestCheckRatio:
    def test_sample_scores_match_server(self, sample_matches):
        strategy = CheckRatioStrategy()
        candidates = [MatchCandidate.model_validate(m) for m in sample_matches]
        scores = strategy.score_all(candidates, Criteria(), Weights())
        assert scores == [m["matchPercentage"] for m in sample_matches]

    def test_one_of_eight(self):
        criteria = Criteria()
        for name in ("lifestyle", "admissions", "demographics", "future"):
            criteria.section(name).enabled = False
        criteria.academics.filters.languages = ["English"]
        criteria.academics.filters.degree_level = "Master"
        criteria.financials.filters.scholarships_international = True
        criteria.financials.filters.need_blind = True
        candidate = _candidate(
            min_gpa=3.5,
            degree_levels=["Bachelor"],
            languages=["French"],
            avg_tuition_per_year=90000,
            cost_of_living_index=300,
            scholarship_availability=0,
            scholarships_international=False,
            need_blind_admissions=False,
        )
        assert CheckRatioStrategy().score(candidate, criteria, Weights()) == 13

    def test_default_city_fails_like_the_server(self):
        candidate = _candidate(
            score=67, min_gpa=3.5, avg_tuition_per_year=20000, location_city="Toronto"
        )
        assert CheckRatioStrategy().score(candidate, Criteria(), Weights()) == 67

    def test_admissions_test_policy_does_not_count(self):
        criteria = Criteria()
        criteria.admissions.filters.test_policy = "SAT"
        candidate = _candidate(min_gpa=3.5, required_tests=["ACT"])
        assert CheckRatioStrategy().score(candidate, criteria, Weights()) == 100
