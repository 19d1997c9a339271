"""Criterion checks mirroring how the ranking server evaluates filters.

Every enabled filter becomes a check. A check answers True (passes), False
(fails) or None when the candidate lacks the data, in which case it does
not count towards the score. Candidate fields are looked up under every
name the server accepts for them.
"""

from abc import abstractmethod
from dataclasses import dataclass
import math
from typing import Any, Callable, Sequence

from models.criteria import Criteria, Weights
from models.matching import MatchCandidate
from services.scenario.base import ScoringStrategy

TUITION_KEYS = ("avg_tuition_per_year", "tuition_international", "tuition")
COUNTRY_KEYS = ("country", "location_country")
INTEREST_KEYS = ("interests", "focus_areas")
GPA_KEYS = ("min_gpa", "gpa_requirement")
DEGREE_KEYS = ("degree_levels", "degree_options")
LANGUAGE_KEYS = ("languages", "instruction_languages")
TEST_KEYS = ("required_tests", "testing_policy")
COST_OF_LIVING_KEYS = ("cost_of_living_index", "cost_of_living")
SCHOLARSHIP_KEYS = ("scholarship_availability", "scholarships_available")
INTL_SCHOLARSHIP_KEYS = ("scholarships_international", "international_scholarships_available")
NEED_BLIND_KEYS = ("need_blind_admissions", "need_blind")
CITY_KEYS = ("location_city", "city")
ENROLLMENT_KEYS = ("enrollment", "student_population")
INTL_PCT_KEYS = ("international_student_percentage", "intl_student_percentage")
VISA_KEYS = ("post_grad_visa_strength", "post_study_work_visa_months")
EMPLOYMENT_KEYS = ("employment_rate", "graduate_employment_rate")

CheckFn = Callable[[MatchCandidate], bool | None]


@dataclass(frozen=True)
class Check:
    name: str
    dimension: str  # weight dimension the check contributes to
    test: CheckFn


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _norm(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip().lower()


def _norm_list(value: Any) -> list[str]:
    if not value:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    return [n for n in (_norm(item) for item in items) if n]


def _specific(value: str | None) -> bool:
    """False for empty values and the 'Any' wildcard."""
    return bool(value) and _norm(value) != "any"


def _at_least(keys: Sequence[str], threshold: float) -> CheckFn:
    def test(candidate: MatchCandidate) -> bool | None:
        value = candidate.field(*keys)
        if not _is_number(value):
            return None
        return value >= threshold
    return test


def _at_most(keys: Sequence[str], threshold: float) -> CheckFn:
    def test(candidate: MatchCandidate) -> bool | None:
        value = candidate.field(*keys)
        if not _is_number(value):
            return None
        return value <= threshold
    return test


def _equals(keys: Sequence[str], target: str) -> CheckFn:
    wanted = _norm(target)

    def test(candidate: MatchCandidate) -> bool | None:
        value = candidate.field(*keys)
        if not value:
            return None
        return _norm(value) == wanted
    return test


def _includes_all(keys: Sequence[str], targets: list[str]) -> CheckFn:
    def test(candidate: MatchCandidate) -> bool | None:
        available = _norm_list(candidate.field(*keys))
        if not available:
            return None
        return all(target in available for target in targets)
    return test


def _flag(keys: Sequence[str]) -> CheckFn:
    def test(candidate: MatchCandidate) -> bool | None:
        value = candidate.field(*keys)
        if value is None:
            return None
        return bool(value)
    return test


def _test_policy(policy: str) -> CheckFn:
    desired = _norm(policy)

    def test(candidate: MatchCandidate) -> bool | None:
        value = candidate.field(*TEST_KEYS)
        if value is None:
            return None
        tests = _norm_list(value)
        if desired in ("no-test", "test-blind"):
            return not tests
        if desired in ("requires-test", "required"):
            return bool(tests)
        return desired in tests
    return test


def build_checks(criteria: Criteria, server_rules: bool = True) -> list[Check]:
    """Checks for every enabled filter.

    With ``server_rules`` the set matches the ranking server exactly: the city
    filter is checked whenever it is non-empty, including the "Any" default,
    and test policy is never checked because the server only reads it under
    academics. Without it "Any" always means no filter and test policy is
    checked under admissions.
    """
    checks: list[Check] = []

    interests = _norm_list(criteria.interests)
    if interests:
        checks.append(Check("interests", "weight_program", _includes_all(INTEREST_KEYS, interests)))

    academics = criteria.academics
    if academics.enabled:
        f = academics.filters
        checks.append(Check("academics.min_gpa", "weight_program", _at_least(GPA_KEYS, f.min_gpa)))
        if _specific(f.degree_level):
            checks.append(Check(
                "academics.degree_level", "weight_program",
                _includes_all(DEGREE_KEYS, [_norm(f.degree_level)]),
            ))
        languages = _norm_list(f.languages)
        if languages:
            checks.append(Check(
                "academics.languages", "weight_language", _includes_all(LANGUAGE_KEYS, languages)
            ))

    financials = criteria.financials
    if financials.enabled:
        f = financials.filters
        checks.append(Check("financials.max_budget", "weight_tuition", _at_most(TUITION_KEYS, f.max_budget)))
        checks.append(Check(
            "financials.max_cost_of_living", "weight_tuition",
            _at_most(COST_OF_LIVING_KEYS, f.max_cost_of_living),
        ))
        checks.append(Check(
            "financials.min_scholarship", "weight_tuition",
            _at_least(SCHOLARSHIP_KEYS, f.min_scholarship),
        ))
        if f.scholarships_international:
            checks.append(Check(
                "financials.scholarships_international", "weight_tuition", _flag(INTL_SCHOLARSHIP_KEYS)
            ))
        if f.need_blind:
            checks.append(Check("financials.need_blind", "weight_tuition", _flag(NEED_BLIND_KEYS)))

    lifestyle = criteria.lifestyle
    if lifestyle.enabled:
        f = lifestyle.filters
        for name, keys, value in (
            ("country", COUNTRY_KEYS, f.country),
            ("city", CITY_KEYS, f.city),
            ("climate", ("climate",), f.climate),
            ("campus_setting", ("campus_setting",), f.campus_setting),
        ):
            wanted = bool(value) if server_rules and name == "city" else _specific(value)
            if wanted:
                checks.append(Check(f"lifestyle.{name}", "weight_location", _equals(keys, value)))

    admissions = criteria.admissions
    if admissions.enabled:
        f = admissions.filters
        checks.append(Check(
            "admissions.max_acceptance_rate", "weight_ranking",
            _at_most(("acceptance_rate",), f.max_acceptance_rate),
        ))
        checks.append(Check(
            "admissions.min_sat", "weight_ranking", _at_least(("sat_average", "sat_minimum"), f.min_sat)
        ))
        if not server_rules and _specific(f.test_policy):
            checks.append(Check("admissions.test_policy", "weight_ranking", _test_policy(f.test_policy)))

    demographics = criteria.demographics
    if demographics.enabled:
        f = demographics.filters
        checks.extend([
            Check("demographics.min_enrollment", "weight_location", _at_least(ENROLLMENT_KEYS, f.min_enrollment)),
            Check("demographics.max_enrollment", "weight_location", _at_most(ENROLLMENT_KEYS, f.max_enrollment)),
            Check(
                "demographics.min_international_pct", "weight_location",
                _at_least(INTL_PCT_KEYS, f.min_international_pct),
            ),
            Check(
                "demographics.max_international_pct", "weight_location",
                _at_most(INTL_PCT_KEYS, f.max_international_pct),
            ),
        ])

    future = criteria.future
    if future.enabled:
        f = future.filters
        checks.extend([
            Check("future.min_visa_months", "weight_ranking", _at_least(VISA_KEYS, f.min_visa_months)),
            Check(
                "future.min_internship_strength", "weight_ranking",
                _at_least(("internship_strength",), f.min_internship_strength),
            ),
            Check(
                "future.min_alumni_strength", "weight_ranking",
                _at_least(("alumni_network_strength",), f.min_alumni_strength),
            ),
            Check(
                "future.min_graduation_rate", "weight_ranking",
                _at_least(("graduation_rate",), f.min_graduation_rate),
            ),
            Check(
                "future.min_employment_rate", "weight_ranking",
                _at_least(EMPLOYMENT_KEYS, f.min_employment_rate),
            ),
        ])

    return checks


def evaluate(checks: list[Check], candidate: MatchCandidate) -> list[tuple[Check, bool]]:
    """Outcomes of the checks that apply to ``candidate``."""
    outcomes = []
    for check in checks:
        passed = check.test(candidate)
        if passed is not None:
            outcomes.append((check, passed))
    return outcomes


class CheckStrategy(ScoringStrategy):
    """Strategy that scores from check outcomes; checks are built once per batch."""

    server_rules: bool = True

    def score(self, candidate: MatchCandidate, criteria: Criteria, weights: Weights) -> int:
        return self.score_all([candidate], criteria, weights)[0]

    def score_all(
        self, candidates: Sequence[MatchCandidate], criteria: Criteria, weights: Weights
    ) -> list[int]:
        checks = build_checks(criteria, self.server_rules)
        return [self._combine(evaluate(checks, c), weights) for c in candidates]

    @abstractmethod
    def _combine(self, outcomes: list[tuple[Check, bool]], weights: Weights) -> int:
        """Turn applicable check outcomes into a percentage."""
