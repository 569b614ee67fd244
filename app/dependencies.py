"""FastAPI dependencies exposing the services built at startup."""

from fastapi import Request

from app.services import (
    DataService,
    FinanceService,
    NewsFeedService,
    Services,
)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_data_service(request: Request) -> DataService:
    return get_services(request).data


def get_finance_service(request: Request) -> FinanceService:
    return get_services(request).finance


def get_news_service(request: Request) -> NewsFeedService:
    return get_services(request).news
