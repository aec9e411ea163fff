"""Request-scoped dependencies"""
from fastapi import Request
from ..core.rate_limit import RateLimitDecision, ServerRateLimiter
from ..services.chat_service import ChatService
from ..services.content_service import ContentService
from ..services.provider_service import ProviderService
from .errors import RateLimitExceeded
from .identity import client_identity


def get_provider_service(request: Request) -> ProviderService:
    """Get provider service from app state"""
    return request.app.state.provider_service


def get_content_service(request: Request) -> ContentService:
    """Get content service from app state"""
    return request.app.state.content_service


def get_chat_service(request: Request) -> ChatService:
    """Get chat service from app state"""
    return request.app.state.chat_service


def get_rate_limiter(request: Request) -> ServerRateLimiter:
    """Get the chat rate limiter from app state"""
    return request.app.state.rate_limiter


def consume_chat_allowance(request: Request, scope: str) -> RateLimitDecision:
    """Take one chat slot for the caller or raise a 429"""
    limiter = get_rate_limiter(request)
    identity = getattr(request.state, "client_identity", None) or client_identity(request)
    decision = limiter.check_and_increment(f"{scope}:{identity}")
    if not decision.allowed:
        raise RateLimitExceeded(decision, limiter.max_requests)
    return decision
