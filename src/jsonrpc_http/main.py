# jsonrpc_http/main.py
from jsonrpc_http.errors import INVALID_PARAMS
from jsonrpc_http.server.registry import RPCMethodRegistry, RegistrySettings

settings = RegistrySettings(strict_mode=True)


def build_registry(settings: RegistrySettings | dict | None = settings) -> RPCMethodRegistry:
    """Demo server exposing add, divide, getUser and greet."""
    rpc = RPCMethodRegistry(name="rpc", settings=settings)

    # --- Register example methods ------------------------------------------------
    @rpc.register("add")
    def add(a: float, b: float) -> float:
        """Add two numbers."""
        return a + b

    @rpc.register("divide")
    def divide(a: float, b: float) -> float:
        """Divide two numbers."""
        if b == 0:
            raise INVALID_PARAMS("division by zero")
        return a / b

    @rpc.register("getUser")
    def get_user(userId: int) -> dict:
        """Look up a user by id."""
        return {"ID": userId, "Name": "Alice", "Role": "Admin"}

    @rpc.register("greet")
    def greet(name: str) -> str:
        return f"Hello, {name}!"

    return rpc


if __name__ == "__main__":
    build_registry().run()
