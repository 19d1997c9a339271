import logging
from typing import Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import SessionRegistry, get_registry
from config import settings
from models.criteria import UnknownFieldError, UnknownSectionError
from models.matching import RankingResult
from models.requests import (
    InterestsRequest,
    MinMatchRequest,
    ScenarioRequest,
    SectionUpdateRequest,
    WeightsUpdateRequest,
)
from models.responses import (
    GenerateResponse,
    RankingView,
    ScenarioView,
    SessionState,
    TabStatus,
)
from models.session import SessionContext
from services.completion import STATUS_LABELS
from services.oracle_client import MalformedResponseError
from services.quota_gate import describe_usage
from services.session import MatchingSession, NoResultsError

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


def _session_or_404(registry: SessionRegistry, session_id: str) -> MatchingSession:
    try:
        return registry.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")


def _apply_edit(action: Callable[[], object]) -> None:
    try:
        action()
    except UnknownSectionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (UnknownFieldError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))


def _ranking_view(result: RankingResult | None) -> RankingView | None:
    if result is None:
        return None
    return RankingView(
        matches=result.matches,
        total_count=result.total_count,
        locked_count=result.locked_count,
    )


def _state(session_id: str, session: MatchingSession) -> SessionState:
    usage = session.quota.usage
    return SessionState(
        session_id=session_id,
        criteria=session.store.criteria.to_payload(),
        weights=session.store.weights,
        statuses=[
            TabStatus(tab=tab, status=status, label=STATUS_LABELS[status])
            for tab, status in session.statuses().items()
        ],
        min_match_percentage=session.min_match_percentage,
        pending=session.ranking.pending,
        results=_ranking_view(session.ranking.result),
        scenario=ScenarioView(
            active=session.scenario.active,
            candidates=session.scenario.candidates,
            adjustments=session.scenario.adjustments,
        ),
        usage=usage,
        usage_display=describe_usage(usage) if usage is not None else None,
        notice=session.notice,
        auth_prompt=session.auth_prompt,
    )


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "oracle_base_url": settings.oracle_base_url,
        "scoring_strategy": settings.scoring_strategy,
    }


@router.post("/sessions", response_model=SessionState, status_code=201)
async def create_session(
    authorization: str | None = Header(default=None),
    registry: SessionRegistry = Depends(get_registry),
):
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None
    try:
        session_id, session = await registry.create(SessionContext(auth_token=token))
    except MalformedResponseError as e:
        logger.error("Unreadable oracle response while starting a session: %s", e)
        raise HTTPException(status_code=502, detail="Ranking service returned an unreadable response")
    return _state(session_id, session)


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _state(session_id, _session_or_404(registry, session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    _session_or_404(registry, session_id)
    await registry.close(session_id)


@router.patch("/sessions/{session_id}/sections/{section}", response_model=SessionState)
async def update_section(
    session_id: str,
    section: str,
    body: SectionUpdateRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    _apply_edit(lambda: session.update_section(section, body.enabled, body.filters))
    return _state(session_id, session)


@router.put("/sessions/{session_id}/interests", response_model=SessionState)
async def set_interests(
    session_id: str,
    body: InterestsRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    session.set_interests(body.interests)
    return _state(session_id, session)


@router.patch("/sessions/{session_id}/weights", response_model=SessionState)
async def update_weights(
    session_id: str,
    body: WeightsUpdateRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    _apply_edit(lambda: session.set_weights(body.weights))
    return _state(session_id, session)


@router.put("/sessions/{session_id}/min-match", response_model=SessionState)
async def set_min_match(
    session_id: str,
    body: MinMatchRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    session.set_min_match_percentage(body.min_match_percentage)
    return _state(session_id, session)


@router.post("/sessions/{session_id}/generate", response_model=GenerateResponse)
@limiter.limit(settings.generate_rate_limit)
async def generate(
    request: Request,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    try:
        outcome = await session.generate()
    except MalformedResponseError as e:
        logger.error("Unreadable ranking response: %s", e)
        raise HTTPException(status_code=502, detail="Ranking service returned an unreadable response")

    if outcome.kind == "skipped":
        raise HTTPException(status_code=409, detail="A ranking request is already in progress")
    return GenerateResponse(
        outcome=outcome.kind,
        notice=outcome.notice,
        results=_ranking_view(outcome.result),
    )


@router.post("/sessions/{session_id}/scenario", response_model=ScenarioView)
async def apply_scenario(
    session_id: str,
    body: ScenarioRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    sections = {
        name: {"enabled": update.enabled, "filters": update.filters}
        for name, update in body.sections.items()
    }
    try:
        _apply_edit(lambda: session.apply_scenario(sections, body.interests, body.weights))
    except NoResultsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ScenarioView(
        active=session.scenario.active,
        candidates=session.scenario.candidates,
        adjustments=session.scenario.adjustments,
    )


@router.delete("/sessions/{session_id}/scenario", response_model=SessionState)
async def reset_scenario(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _session_or_404(registry, session_id)
    session.reset_to_original()
    return _state(session_id, session)


@router.delete("/sessions/{session_id}/notice", response_model=SessionState)
async def dismiss_notice(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _session_or_404(registry, session_id)
    session.dismiss_notice()
    session.dismiss_auth_prompt()
    return _state(session_id, session)
