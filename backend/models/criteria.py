"""Live filter configuration: criteria sections, interests and weights.

Field sets are fixed. Every model forbids extra keys and validates on
assignment, so the live edit buffer can be mutated in place without ever
growing or losing a field. Wire names are camelCase for section filters
and snake_case for weights, matching the ranking oracle.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class UnknownSectionError(ValueError):
    """Raised when a section name is not part of the criteria."""


class UnknownFieldError(ValueError):
    """Raised when a filter field does not exist in its section."""


class CompletionStatus(str, Enum):
    DISABLED = "disabled"
    DEFAULT = "default"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


_FILTERS_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    validate_assignment=True,
    extra="forbid",
)


class AcademicsFilters(BaseModel):
    model_config = _FILTERS_CONFIG

    min_gpa: float = Field(3.0, ge=0, le=4)
    degree_level: str = "Any"
    languages: list[str] = []
    research_level: str = "Any"
    study_abroad: bool = False


class FinancialsFilters(BaseModel):
    model_config = _FILTERS_CONFIG

    max_budget: float = Field(50000, ge=0, le=150000)
    max_cost_of_living: float = Field(100, ge=0, le=50000)
    min_scholarship: float = Field(1, ge=1, le=5)
    scholarships_international: bool = False
    need_blind: bool = False


class LifestyleFilters(BaseModel):
    model_config = _FILTERS_CONFIG

    country: str = "Any"
    campus_setting: str = "Any"
    climate: str = "Any"
    city: str = "Any"


class AdmissionsFilters(BaseModel):
    model_config = _FILTERS_CONFIG

    max_acceptance_rate: float = Field(100, ge=0, le=100)
    test_policy: str = "Any"
    min_sat: float = Field(0, ge=0, le=1600)
    max_sat: float = Field(1600, ge=0, le=1600)


class DemographicsFilters(BaseModel):
    model_config = _FILTERS_CONFIG

    min_enrollment: float = Field(0, ge=0)
    max_enrollment: float = Field(100000, ge=0)
    min_international_pct: float = Field(0, ge=0, le=100)
    max_international_pct: float = Field(100, ge=0, le=100)


class FutureFilters(BaseModel):
    model_config = _FILTERS_CONFIG

    min_visa_months: float = Field(0, ge=0, le=60)
    min_internship_strength: float = Field(1, ge=1, le=5)
    min_alumni_strength: float = Field(1, ge=1, le=5)
    min_graduation_rate: float = Field(0, ge=0, le=100)
    min_employment_rate: float = Field(0, ge=0, le=100)


class CriteriaSection(BaseModel):
    """A named, independently enable-able group of filter fields."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    enabled: bool = True
    filters: BaseModel


class AcademicsSection(CriteriaSection):
    filters: AcademicsFilters = Field(default_factory=AcademicsFilters)


class FinancialsSection(CriteriaSection):
    filters: FinancialsFilters = Field(default_factory=FinancialsFilters)


class LifestyleSection(CriteriaSection):
    filters: LifestyleFilters = Field(default_factory=LifestyleFilters)


class AdmissionsSection(CriteriaSection):
    filters: AdmissionsFilters = Field(default_factory=AdmissionsFilters)


class DemographicsSection(CriteriaSection):
    filters: DemographicsFilters = Field(default_factory=DemographicsFilters)


class FutureSection(CriteriaSection):
    filters: FutureFilters = Field(default_factory=FutureFilters)


SECTION_NAMES: tuple[str, ...] = (
    "academics",
    "financials",
    "lifestyle",
    "admissions",
    "demographics",
    "future",
)


class Criteria(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    academics: AcademicsSection = Field(default_factory=AcademicsSection)
    financials: FinancialsSection = Field(default_factory=FinancialsSection)
    lifestyle: LifestyleSection = Field(default_factory=LifestyleSection)
    admissions: AdmissionsSection = Field(default_factory=AdmissionsSection)
    demographics: DemographicsSection = Field(default_factory=DemographicsSection)
    future: FutureSection = Field(default_factory=FutureSection)
    interests: list[str] = []

    def section(self, name: str) -> CriteriaSection:
        if name not in SECTION_NAMES:
            raise UnknownSectionError(f"Unknown section: {name}")
        return getattr(self, name)

    @property
    def sections(self) -> dict[str, CriteriaSection]:
        return {name: getattr(self, name) for name in SECTION_NAMES}

    def to_payload(self) -> dict:
        """Sections at the top level with camelCase filters, as the oracle expects."""
        payload = {
            name: {
                "enabled": section.enabled,
                "filters": section.filters.model_dump(by_alias=True),
            }
            for name, section in self.sections.items()
        }
        payload["interests"] = list(self.interests)
        return payload


class Weights(BaseModel):
    """Importance of each ranking dimension, every value clamped to [0, 1]."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid", allow_inf_nan=False)

    weight_tuition: float = 0.5
    weight_location: float = 0.5
    weight_ranking: float = 0.5
    weight_program: float = 0.5
    weight_language: float = 0.5

    @field_validator("*")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return min(1.0, max(0.0, float(value)))


DIMENSIONS: tuple[str, ...] = tuple(Weights.model_fields)


def resolve_field(model: type[BaseModel], field: str) -> str:
    """Map a python or wire (camelCase) field name to the model attribute."""
    if field in model.model_fields:
        return field
    for name, info in model.model_fields.items():
        if info.alias == field:
            return name
    raise UnknownFieldError(f"Unknown field '{field}' for {model.__name__}")
