"""
Handler modules with automatic API registration
Functions decorated with @api_handler are collected in a registry and mounted
on a FastAPI application by register_fastapi_routes()
"""

import inspect
import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Type,
    TypeVar,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)

# Global API handler registry
_handler_registry: Dict[str, Dict[str, Any]] = {}


def api_handler(
    body: Optional[Type] = None,
    method: str = "POST",
    path: Optional[str] = None,
    tags: Optional[List[str]] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
):
    """
    API handler decorator

    @param body - Optional request model type for parameter validation
    @param method - HTTP method (GET, POST, PUT, DELETE, PATCH)
    @param path - Custom path, defaults to /<function name>
    @param tags - API tags
    @param summary - API summary
    @param description - API description
    """

    def decorator(func: F) -> F:
        func_name = getattr(func, "__name__", "unknown")
        func_module = getattr(func, "__module__", "")
        module_name = func_module.split(".")[-1] if func_module else "unknown"
        func_doc = getattr(func, "__doc__", None)

        _handler_registry[func_name] = {
            "func": func,
            "body": body,
            "method": method.upper(),
            "path": path or f"/{func_name}",
            "tags": tags or [module_name],
            "module": module_name,
            "summary": summary or (func_doc.split("\n")[0] if func_doc else func_name),
            "description": description or func_doc or "",
            "signature": inspect.signature(func),
        }

        # Keep original function unchanged
        return func

    return decorator


def get_registered_handlers() -> Dict[str, Dict[str, Any]]:
    """
    Get registered handler information (for debugging)

    @returns Handler registry
    """
    return _handler_registry.copy()


def register_fastapi_routes(app: "FastAPI", prefix: str = "/api") -> None:
    """
    Register all functions decorated with @api_handler as FastAPI routes

    @param app - FastAPI application instance
    @param prefix - Route prefix
    """
    logger.info(f"Starting FastAPI route registration, {len(_handler_registry)} handlers")

    for handler_name, handler_info in _handler_registry.items():
        func = handler_info["func"]
        method = handler_info.get("method", "POST")
        full_path = f"{prefix}{handler_info.get('path', f'/{handler_name}')}"

        route_params: Dict[str, Any] = {
            "path": full_path,
            "tags": handler_info.get("tags", []),
            "summary": handler_info.get("summary", handler_name),
            "description": handler_info.get("description", ""),
            "response_model": None,
        }

        if method == "GET":
            app.get(**route_params)(func)
        elif method == "POST":
            app.post(**route_params)(func)
        elif method == "PUT":
            app.put(**route_params)(func)
        elif method == "DELETE":
            app.delete(**route_params)(func)
        elif method == "PATCH":
            app.patch(**route_params)(func)
        else:
            logger.warning(f"Unknown HTTP method: {method} for {handler_name}")
            continue

        logger.debug(
            f"Registered route: {method} {full_path} ({handler_name} from {handler_info['module']})"
        )

    logger.info(f"FastAPI route registration completed: {len(_handler_registry)} routes")


# Import all handler modules to trigger decorator registration
# Note: These imports must be after all decorator definitions to avoid circular imports
# ruff: noqa: E402
from . import logs

__all__ = [
    "api_handler",
    "register_fastapi_routes",
    "get_registered_handlers",
    "logs",
]
