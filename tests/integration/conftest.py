"""Integration fixtures: the real HTTP transport against an in-process API.

The fake backend is mounted behind a FastAPI app under ``/api`` and reached
through ``httpx.ASGITransport``, so requests go through URL joining, header
handling, JSON encoding and status mapping exactly as they would against the
deployed storefront.
"""

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.cart.service import CartService
from storefront.coupons.service import CouponService
from storefront.transport.http_adapter import HttpxTransport

API_TOKEN = "test-token"


def create_app(backend) -> FastAPI:
    app = FastAPI(title="Storefront API (test)")
    app.state.seen_headers = []

    @app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
    async def dispatch(path: str, request: Request):
        app.state.seen_headers.append(dict(request.headers))
        body = await request.body()
        payload = await request.json() if body else None
        status, data = backend.handle(request.method, path, payload)
        return JSONResponse(status_code=status, content=data)

    return app


@pytest.fixture()
def api_app(backend):
    return create_app(backend)


@pytest.fixture()
async def http_transport(api_app):
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=api_app), base_url="http://test/api")
    transport = HttpxTransport("http://test/api", token=API_TOKEN, client=client)
    yield transport
    await client.aclose()


@pytest.fixture()
def http_cart_service(http_transport):
    return CartService(http_transport)


@pytest.fixture()
def http_coupon_service(http_transport):
    return CouponService(http_transport)
