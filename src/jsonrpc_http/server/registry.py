# jsonrpc_http/server/registry.py
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type, get_type_hints

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jsonrpc_http.config import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MOUNT_PATH,
    DEFAULT_PORT,
)
from jsonrpc_http.errors import INVALID_PARAMS, METHOD_NOT_FOUND
from jsonrpc_http.server.dispatcher import RPCDispatcher
from jsonrpc_http.transport.http import HTTPTransport


# ──────────────────────────────────────────────────────────────
# _MethodWrapper – Holds function + metadata
# ──────────────────────────────────────────────────────────────
@dataclass
class _MethodWrapper:
    """
    Wraps an RPC method with metadata for introspection, validation, and dispatch.

    This class is callable (behaves like the original function) and stores:
    - Original function
    - Name, description
    - Parameter types (from type hints)
    - Return type
    """

    fn: Callable[..., Any]
    """Original function to be called."""

    name: str
    """RPC method name (as registered)."""

    description: str | None = None
    """Human-readable description of the method."""

    param_types: Dict[str, Type] = field(default_factory=dict)
    """Mapping of parameter name → type (from type hints)."""

    return_type: Optional[Type] = None
    """Return type of the function (from type hints)."""

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.fn(*args, **kwargs)

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.fn)

    @property
    def signature(self) -> inspect.Signature:
        return inspect.signature(self.fn)

    def validate_params(self, params: Any) -> None:
        """
        Check incoming params against the signature and the plain-class type hints.
        Raise JSONRPCError(INVALID_PARAMS) on failure.
        """
        try:
            if params is None:
                bound = self.signature.bind()
            elif isinstance(params, list):
                bound = self.signature.bind(*params)
            elif isinstance(params, dict):
                bound = self.signature.bind(**params)
            else:
                raise INVALID_PARAMS({"reason": "params must be list or dict"})
        except TypeError as e:
            raise INVALID_PARAMS({"reason": str(e)})

        for name, value in bound.arguments.items():
            expected_type = self.param_types.get(name)
            if not isinstance(expected_type, type):
                continue
            if isinstance(value, bool) and expected_type in (int, float):
                ok = False
            elif expected_type is float:
                # JSON has one number type; ints are fine where floats are expected
                ok = isinstance(value, (int, float))
            else:
                ok = isinstance(value, expected_type)
            if not ok:
                raise INVALID_PARAMS({
                    "reason": f"param '{name}' should be {expected_type.__name__}, got {type(value).__name__}"
                })

    def to_json(self) -> dict:
        """Return method info as JSON-serializable dict."""
        return {
            "name": self.name,
            "description": self.description,
            "param_types": {k: str(v) for k, v in self.param_types.items()},
            "return_type": str(self.return_type) if self.return_type else None,
            "is_async": self.is_async,
        }


# ──────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────
def _configure_registry_logging(level: str | int = "INFO"):
    logger = logging.getLogger("jsonrpc_http")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)


# ──────────────────────────────────────────────────────────────
# Settings
# ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class RegistrySettings:
    warn_on_duplicate: bool = True
    log_level: str | int = DEFAULT_LOG_LEVEL
    strict_mode: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    mount_path: str = DEFAULT_MOUNT_PATH
    cors: bool = True


# ──────────────────────────────────────────────────────────────
# Main Registry Class
# ──────────────────────────────────────────────────────────────
class RPCMethodRegistry:
    """
    Method name → handler mapping for one server, plus the FastAPI app
    that serves it. Nothing is kept at module level, so several
    registries can live in one process (tests do this).
    """

    def __init__(
        self,
        name: str | None = None,
        settings: RegistrySettings | dict | None = None,
    ):
        # normalize settings: accept dataclass or dict or None
        if settings is None:
            self._settings: RegistrySettings = RegistrySettings()
        elif isinstance(settings, RegistrySettings):
            self._settings = settings
        elif isinstance(settings, dict):
            self._settings = RegistrySettings(**settings)
        else:
            raise TypeError("settings must be RegistrySettings | dict | None")

        self._name = name or "RPCRegistry"
        self._methods: Dict[str, _MethodWrapper] = {}
        self._logger = logging.getLogger("jsonrpc_http.registry")
        self._app: FastAPI | None = None

        _configure_registry_logging(self._settings.log_level)
        self._logger.info(f"Initialized {self._name}")

    # ───── Properties ─────
    @property
    def name(self) -> str:
        return self._name

    @property
    def methods(self) -> Dict[str, Callable]:
        return {name: wrapper.fn for name, wrapper in self._methods.items()}

    @property
    def settings(self) -> RegistrySettings:
        return self._settings

    @property
    def app(self) -> FastAPI:
        if self._app is None:
            self._app = self._setup_fastapi_app()
        return self._app

    # ───── Register Decorator ─────
    def register(
        self,
        name: str | None = None,
        description: str | None = None,
    ):
        def decorator(fn: Callable) -> Callable:
            method_name = name or fn.__name__

            if method_name in self._methods:
                if not self._settings.warn_on_duplicate:
                    raise ValueError(f"Method '{method_name}' already registered")
                self._logger.warning(f"Replacing already registered method: {method_name}")

            hints = get_type_hints(fn)
            return_hint = hints.pop("return", None)
            self._methods[method_name] = _MethodWrapper(
                fn=fn,
                name=method_name,
                description=description or inspect.getdoc(fn),
                param_types=hints,
                return_type=return_hint,
            )
            self._logger.debug(f"Registered: {method_name}")
            return fn
        return decorator

    # ───── Get Method ─────
    def get(self, method_name: str) -> _MethodWrapper:
        try:
            return self._methods[method_name]
        except KeyError:
            self._logger.error(f"Method not found: {method_name}")
            raise METHOD_NOT_FOUND({"method": method_name})

    # ───── Introspection ─────
    def list_methods(self) -> Dict[str, dict]:
        return {name: w.to_json() for name, w in self._methods.items()}

    # ───── Run ─────
    def run(self, *, host: str | None = None, port: int | None = None) -> None:
        """Serve the JSON-RPC endpoint over HTTP until interrupted."""
        host = host or self._settings.host
        port = port or self._settings.port
        anyio.run(self._run_http_async, host, port)

    async def _run_http_async(self, host: str, port: int):
        log_level = self._settings.log_level
        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=log_level.lower() if isinstance(log_level, str) else log_level,
        )
        server = uvicorn.Server(config)
        self._logger.info(f"Starting HTTP server at http://{host}:{port}{self._settings.mount_path}")
        await server.serve()

    # ───── FastAPI App Setup ─────
    def _setup_fastapi_app(self) -> FastAPI:
        transport = HTTPTransport(RPCDispatcher(self))

        app = FastAPI(title=self._name)
        if self._settings.cors:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["POST", "OPTIONS"],
                allow_headers=["Content-Type"],
            )

        # RPC endpoint
        app.post(self._settings.mount_path)(transport.handle)

        # Introspection endpoint
        async def methods_endpoint():
            return JSONResponse(content={"result": self.list_methods(), "error": None})

        app.get("/methods")(methods_endpoint)
        return app
