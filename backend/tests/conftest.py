"""Shared test configuration, pytest markers and an in-memory ranking oracle."""

import asyncio

import pytest

from models.result import Ok, Result
from services.scenario.registry import clear as clear_strategies

# Server-side scores use the check-ratio formula on default criteria:
# only min_gpa (>= 3.0) and tuition (<= 50000) apply to these records.
SAMPLE_MATCHES = [
    {"id": "u1", "name": "Northfield University", "matchPercentage": 100,
     "min_gpa": 3.5, "avg_tuition_per_year": 20000, "country": "Canada"},
    {"id": "u2", "name": "Lakeside College", "matchPercentage": 50,
     "min_gpa": 2.5, "avg_tuition_per_year": 20000, "country": "USA"},
    {"id": "u3", "name": "Harbor Institute", "matchPercentage": 50,
     "min_gpa": 3.5, "avg_tuition_per_year": 60000, "country": "UK"},
    {"id": "u4", "name": "Summit Academy", "matchPercentage": 100},
]

USAGE_COUNT = {
    "planKey": "free",
    "configured": True,
    "accessLevel": "count",
    "limitValue": 5,
    "remaining": 3,
    "used": 2,
    "source": "plan",
}


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "timing: relies on short real-time debounce delays"
    )


class FakeOracle:
    """Stand-in for OracleClient. Set ``hold`` to keep match calls in flight."""

    def __init__(self) -> None:
        self.match_result: Result = Ok({"matches": SAMPLE_MATCHES, "totalCount": 9})
        self.usage_result: Result = Ok(dict(USAGE_COUNT))
        self.preferences_result: Result = Ok(None)
        self.save_result: Result = Ok({})
        self.match_calls: list[dict] = []
        self.usage_calls = 0
        self.saved: list[dict] = []
        self.hold: asyncio.Event | None = None
        self.closed = False

    async def match(self, payload):
        self.match_calls.append(payload)
        if self.hold is not None:
            await self.hold.wait()
        return self.match_result

    async def usage(self, feature):
        self.usage_calls += 1
        return self.usage_result

    async def get_preferences(self):
        return self.preferences_result

    async def save_preferences(self, weights):
        self.saved.append(weights)
        return self.save_result

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture
def sample_matches():
    return [dict(m) for m in SAMPLE_MATCHES]


@pytest.fixture(autouse=True)
def _reset_strategies():
    """Clear strategy registry around each test."""
    clear_strategies()
    yield
    clear_strategies()
