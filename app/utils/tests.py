from typing import Any, Callable, Dict, Optional

import httpx
from fastapi import FastAPI


def create_test_app(
    routers,
    middlewares=None,
    dependency_overrides: Optional[Dict[Callable[..., Any], Callable[..., Any]]] = None,
) -> FastAPI:
    """
    Create a FastAPI test application with the given routers and middlewares.

    Args:
        routers: A router or list of routers to include in the app.
        middlewares: Optional list of (middleware_class, config_dict) tuples.
        dependency_overrides: Optional mapping of dependency -> replacement,
            typically used to stub the acting user and backend client.

    Returns:
        FastAPI: A configured FastAPI application.

    Example:
        app = create_test_app(
            monitoring_router,
            dependency_overrides={get_current_user: lambda: user},
        )
    """
    app = FastAPI()

    from api.dependencies.rate_limits import setup_rate_limiter

    setup_rate_limiter(app)

    if middlewares:
        for middleware_class, middleware_config in middlewares:
            app.add_middleware(middleware_class, **middleware_config)

    if not isinstance(routers, list):
        routers = [routers]
    for router in routers:
        app.include_router(router)

    if dependency_overrides:
        app.dependency_overrides.update(dependency_overrides)

    return app


async def rate_limiting_helper(
    app,
    endpoint: str,
    request_limit: int,
    method: str = "get",
    expected_status: int = 200,
    headers: Optional[dict] = None,
    json: Optional[Any] = None,
):
    """
    Helper function to test rate limiting for an endpoint.

    Args:
        app: The FastAPI app instance.
        endpoint: The endpoint to test.
        request_limit: Number of requests allowed before rate limiting.
        method: HTTP method to use (e.g., "get", "post").
        expected_status: Expected status code for successful requests.
        headers: Optional headers to include in the requests.
        json: Optional JSON body for POST requests.
    """
    transport = httpx.ASGITransport(app=app)
    headers = headers or {}
    kwargs: Dict[str, Any] = {"headers": headers}
    if json is not None:
        kwargs["json"] = json

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        http_method = getattr(client, method.lower())

        for i in range(request_limit):
            response = await http_method(endpoint, **kwargs)
            assert (
                response.status_code == expected_status
            ), f"Request {i+1} failed with status {response.status_code}"

        response = await http_method(endpoint, **kwargs)
        assert response.status_code == 429, "Expected rate limiting to trigger"
        assert response.json() == {"message": "Rate limit exceeded"}
