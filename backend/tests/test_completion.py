"""Tests for the completion classifier and defaults registry."""

import pytest

from models.criteria import SECTION_NAMES, CompletionStatus, Criteria, Weights
from services.completion import (
    STATUS_LABELS,
    classify,
    section_status,
    tab_statuses,
    values_equal,
    weights_status,
)
from services.defaults import DEFAULTS

ALL_CHANGED = {
    "academics": {"min_gpa": 3.6, "degree_level": "Master", "languages": ["English"],
                  "research_level": "High", "study_abroad": True},
    "financials": {"max_budget": 30000, "max_cost_of_living": 20000, "min_scholarship": 3,
                   "scholarships_international": True, "need_blind": True},
    "lifestyle": {"country": "Canada", "campus_setting": "Urban", "climate": "Temperate",
                  "city": "Toronto"},
    "admissions": {"max_acceptance_rate": 40, "test_policy": "Required", "min_sat": 1200,
                   "max_sat": 1500},
    "demographics": {"min_enrollment": 5000, "max_enrollment": 40000,
                     "min_international_pct": 10, "max_international_pct": 60},
    "future": {"min_visa_months": 24, "min_internship_strength": 3, "min_alumni_strength": 4,
               "min_graduation_rate": 70, "min_employment_rate": 80},
}


def _criteria_with(section: str, changes: dict) -> Criteria:
    criteria = DEFAULTS.new_criteria()
    filters = criteria.section(section).filters
    for field, value in changes.items():
        setattr(filters, field, value)
    return criteria


class TestValuesEqual:
    def test_scalars(self):
        assert values_equal(3.0, 3.0)
        assert not values_equal("Any", "any")

    def test_sequences_are_order_sensitive(self):
        assert values_equal(["English", "French"], ("English", "French"))
        assert not values_equal(["French", "English"], ("English", "French"))

    def test_sequences_are_length_sensitive(self):
        assert not values_equal(["English"], ["English", "English"])


class TestClassify:
    def test_defaults_against_themselves(self):
        for name in SECTION_NAMES:
            filters = DEFAULTS.filters(name)
            assert classify(filters, filters, enabled=True) == CompletionStatus.DEFAULT

    def test_disabled_wins_over_values(self):
        live = {"min_gpa": 9, "languages": ["x"]}
        assert classify(live, DEFAULTS.filters("academics"), enabled=False) == CompletionStatus.DISABLED

    def test_reordered_list_counts_as_change(self):
        status = classify({"languages": ["French", "English"]}, {"languages": ("English", "French")})
        assert status == CompletionStatus.COMPLETE

    def test_only_default_keys_are_compared(self):
        status = classify({"a": 1, "extra": 99}, {"a": 1})
        assert status == CompletionStatus.DEFAULT

    def test_accepts_models_and_mappings(self):
        live = Weights(weight_tuition=0.9)
        assert classify(live, DEFAULTS.weights) == CompletionStatus.INCOMPLETE


class TestSectionStatus:
    @pytest.mark.parametrize("section", SECTION_NAMES)
    def test_default(self, section):
        assert section_status(DEFAULTS.new_criteria(), section) == CompletionStatus.DEFAULT

    @pytest.mark.parametrize("section", SECTION_NAMES)
    def test_all_fields_changed_is_complete(self, section):
        criteria = _criteria_with(section, ALL_CHANGED[section])
        assert section_status(criteria, section) == CompletionStatus.COMPLETE

    @pytest.mark.parametrize("section", SECTION_NAMES)
    def test_one_field_changed_is_incomplete(self, section):
        field, value = next(iter(ALL_CHANGED[section].items()))
        criteria = _criteria_with(section, {field: value})
        assert section_status(criteria, section) == CompletionStatus.INCOMPLETE

    @pytest.mark.parametrize("section", SECTION_NAMES)
    def test_disabled(self, section):
        criteria = _criteria_with(section, ALL_CHANGED[section])
        criteria.section(section).enabled = False
        assert section_status(criteria, section) == CompletionStatus.DISABLED


class TestWeightsStatus:
    def test_default(self):
        assert weights_status(Weights()) == CompletionStatus.DEFAULT

    def test_some_changed(self):
        assert weights_status(Weights(weight_language=0.2)) == CompletionStatus.INCOMPLETE

    def test_all_changed(self):
        weights = Weights(
            weight_tuition=0.1,
            weight_location=0.2,
            weight_ranking=0.3,
            weight_program=0.9,
            weight_language=1.0,
        )
        assert weights_status(weights) == CompletionStatus.COMPLETE


class TestTabStatuses:
    def test_everything_default(self):
        statuses = tab_statuses(DEFAULTS.new_criteria(), DEFAULTS.new_weights())
        assert list(statuses) == ["weights", *SECTION_NAMES]
        assert set(statuses.values()) == {CompletionStatus.DEFAULT}

    def test_disabling_customised_financials(self):
        criteria = _criteria_with("financials", {"max_budget": 20000})
        assert tab_statuses(criteria, Weights())["financials"] == CompletionStatus.INCOMPLETE

        criteria.financials.enabled = False
        statuses = tab_statuses(criteria, Weights())
        assert statuses["financials"] == CompletionStatus.DISABLED
        assert statuses["academics"] == CompletionStatus.DEFAULT

    def test_every_status_has_a_label(self):
        assert set(STATUS_LABELS) == set(CompletionStatus)


class TestDefaultsRegistry:
    def test_snapshots_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULTS.filters("academics")["min_gpa"] = 1.0
        assert DEFAULTS.filters("academics")["languages"] == ()

    def test_new_criteria_is_independent(self):
        first = DEFAULTS.new_criteria()
        first.academics.filters.languages.append("English")
        assert DEFAULTS.new_criteria().academics.filters.languages == []

    def test_matches_model_defaults(self):
        assert DEFAULTS.new_criteria() == Criteria()
        assert DEFAULTS.new_weights() == Weights()
        assert DEFAULTS.filters("financials")["max_budget"] == 50000
        assert DEFAULTS.weights["weight_program"] == 0.5
