import logging
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from fedfirewall.container import FirewallContainer
from fedfirewall.core.api_models import (
    ErrorResponse,
    InboxCheckRequest,
    InboxCheckResponse,
    PolicyModel,
    PolicyRequest,
    ResolutionModel,
)
from fedfirewall.core.exceptions import FirewallException
from fedfirewall.policy_engine.policies import Policy
from fedfirewall.policy_engine.resolution import Resolution


logger = logging.getLogger(__name__)

# Routers by context
inbox_router = APIRouter()
policies_router = APIRouter()
health_router = APIRouter()


def _container(request: Request) -> FirewallContainer:
    return request.app.state.container


def _resolution_model(resolution: Resolution) -> ResolutionModel:
    return ResolutionModel(**resolution.to_record())


def _policy_model(policy: Policy) -> PolicyModel:
    return PolicyModel(**policy.to_record())


@health_router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Dictionary with status and service name
    """
    return {"status": "healthy", "service": "fedfirewall"}


@inbox_router.post("/api/inbox/{target_user_id}/check", response_model=InboxCheckResponse)
async def check_activity(target_user_id: str, payload: InboxCheckRequest, request: Request) -> InboxCheckResponse:
    """
    Decide whether an inbound activity must be blocked for a local actor.

    Any error response means the activity must not be delivered.

    Args:
        target_user_id: Local actor the activity is addressed to
        payload: Activity IRI, type and sender identities
        request: Request object

    Returns:
        Decision with every resolution recorded for it
    """
    container = _container(request)
    orchestrator = container.orchestrator_service()
    context = {"target_user_id": target_user_id, "activity_type": payload.activity_type}

    try:
        decision = await container.policy_service().evaluate(
            target_user_id, payload.from_iris, payload.activity_id, payload.activity_type
        )
    except FirewallException as e:
        orchestrator.reject(e, payload.activity_id, context)
        raise

    orchestrator.execute(decision, payload.activity_id, context)
    return InboxCheckResponse(
        blocked=decision.blocked,
        outcome=decision.outcome.value,
        reason=decision.reason,
        resolutions=[_resolution_model(r) for r in decision.resolutions],
    )


@policies_router.get("/api/policies", response_model=list[PolicyModel])
async def list_instance_policies(request: Request) -> list[PolicyModel]:
    """List instance-wide policies in evaluation order."""
    policies = await _container(request).policy_service().instance_policies()
    return [_policy_model(p) for p in policies]


@policies_router.get("/api/users/{user_id}/policies", response_model=list[PolicyModel])
async def list_user_policies(user_id: str, request: Request) -> list[PolicyModel]:
    """List one actor's own policies in evaluation order."""
    policies = await _container(request).policy_service().user_policies(user_id)
    return [_policy_model(p) for p in policies]


@policies_router.post("/api/policies", response_model=PolicyModel, status_code=status.HTTP_201_CREATED)
async def create_policy(payload: PolicyRequest, request: Request) -> PolicyModel:
    """Create a policy. Invalid kinds or scopes are rejected with 409."""
    service = _container(request).policy_service()
    policy = Policy.load({**payload.model_dump(), "purpose": service.purpose})
    await service.add_policy(policy)
    return _policy_model(policy)


@policies_router.put("/api/policies/{policy_id}", response_model=PolicyModel)
async def update_policy(policy_id: str, payload: PolicyRequest, request: Request) -> PolicyModel:
    """Replace an existing policy."""
    service = _container(request).policy_service()
    if await service.get_policy(policy_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Policy {policy_id} not found")
    policy = Policy.load({**payload.model_dump(), "id": policy_id, "purpose": service.purpose})
    await service.update_policy(policy)
    return _policy_model(policy)


@policies_router.get("/api/users/{user_id}/resolutions", response_model=list[ResolutionModel])
async def list_user_resolutions(user_id: str, request: Request) -> list[ResolutionModel]:
    """Audit trail of verdicts for activities addressed to an actor."""
    resolutions = await _container(request).policy_service().user_resolutions(user_id)
    return [_resolution_model(r) for r in resolutions]


async def firewall_exception_handler(request: Request, exc: FirewallException) -> JSONResponse:
    """Convert firewall exceptions to the standard error format."""
    logger.warning(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    body: dict[str, Any] = ErrorResponse(**exc.to_dict()).model_dump()
    return JSONResponse(status_code=exc.status_code, content=body)


def create_app(container: FirewallContainer) -> FastAPI:
    """
    Create the FastAPI instance and register routers.

    Args:
        container: Dependency injection container used by the endpoints

    Returns:
        FastAPI application
    """
    app = FastAPI(title="Federation Firewall")
    app.state.container = container
    app.add_exception_handler(FirewallException, firewall_exception_handler)
    app.include_router(health_router)
    app.include_router(inbox_router)
    app.include_router(policies_router)
    return app
