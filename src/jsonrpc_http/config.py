# jsonrpc_http/config.py
import os

from dotenv import load_dotenv

load_dotenv()

# Read from env (or .env), otherwise fall back to these defaults
DEFAULT_ENDPOINT: str = os.getenv("JSONRPC_ENDPOINT", "http://127.0.0.1:8080/rpc")
DEFAULT_HOST: str = os.getenv("JSONRPC_HOST", "127.0.0.1")
DEFAULT_PORT: int = int(os.getenv("JSONRPC_PORT", "8080"))
DEFAULT_MOUNT_PATH: str = os.getenv("JSONRPC_MOUNT_PATH", "/rpc")
DEFAULT_LOG_LEVEL: str = os.getenv("JSONRPC_LOG_LEVEL", "INFO")
DEFAULT_TIMEOUT: float = float(os.getenv("JSONRPC_TIMEOUT", "10.0"))
