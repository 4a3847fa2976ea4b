"""Shared test fixtures."""

# ruff: noqa: E402  -- JWT_SECRET has no default and must exist before Settings loads

import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.main import create_app


@pytest.fixture
def app() -> FastAPI:
    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
