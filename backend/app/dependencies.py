"""
Request-scoped dependencies. Collaborators live on ``app.state`` and are
handed to handlers per request.
"""

from fastapi import Depends, Header, Request

from app.config import Settings
from app.exceptions import DataUnavailable
from app.services.identity import IdentityResolver
from app.services.trade_finder import TradeCycleFinder
from app.services.trade_service import TradeService
from app.store.base import BarterRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> BarterRepository:
    repository = request.app.state.repository
    if repository is None:
        raise DataUnavailable("No data store is configured")
    return repository


def get_identity(request: Request) -> IdentityResolver:
    return request.app.state.identity


def get_current_user_id(
    authorization: str | None = Header(default=None),
    identity: IdentityResolver = Depends(get_identity),
) -> str:
    return identity.resolve(authorization)


def get_trade_finder(
    repository: BarterRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> TradeCycleFinder:
    return TradeCycleFinder.from_settings(repository, settings)


def get_trade_service(repository: BarterRepository = Depends(get_repository)) -> TradeService:
    return TradeService(repository)
