"""
Configuration

Settings for the contract client, HTTP API and CLI, read from the environment
(and a local .env file, loaded with python-dotenv).

Environment variables:
- SNARKTOR_RPC_URL: JSON-RPC endpoint of the chain running the verifier contract
- SNARKTOR_CONTRACT_ADDRESS: address of the deployed verifier contract
- SNARKTOR_PRIVATE_KEY: signer key for submissions (optional, read-only without it)
- SNARKTOR_API_HOST / SNARKTOR_API_PORT: bind address of the HTTP API
- SNARKTOR_LOG_LEVEL: logging level name
- SNARKTOR_RPC_TIMEOUT: seconds to wait for RPC responses and receipts
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_RPC_TIMEOUT = 30

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def log_level_from_env() -> str:
    """
    Read SNARKTOR_LOG_LEVEL as an upper-case level name.

    Raises:
        ValueError: If the value is not a standard logging level name
    """
    level = os.getenv("SNARKTOR_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"SNARKTOR_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level



@dataclass(frozen=True)
class Settings:
    """Process settings resolved from the environment."""
    rpc_url: Optional[str] = None
    contract_address: Optional[str] = None
    private_key: Optional[str] = None
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    rpc_timeout: int = DEFAULT_RPC_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If SNARKTOR_API_PORT or SNARKTOR_RPC_TIMEOUT is not an integer,
                or SNARKTOR_LOG_LEVEL is not a logging level name
        """
        port = os.getenv("SNARKTOR_API_PORT", str(DEFAULT_API_PORT))
        timeout = os.getenv("SNARKTOR_RPC_TIMEOUT", str(DEFAULT_RPC_TIMEOUT))
        try:
            api_port = int(port)
            rpc_timeout = int(timeout)
        except ValueError:
            raise ValueError(
                f"SNARKTOR_API_PORT and SNARKTOR_RPC_TIMEOUT must be integers, got {port!r} and {timeout!r}"
            ) from None

        return cls(
            rpc_url=os.getenv("SNARKTOR_RPC_URL") or None,
            contract_address=os.getenv("SNARKTOR_CONTRACT_ADDRESS") or None,
            private_key=os.getenv("SNARKTOR_PRIVATE_KEY") or None,
            api_host=os.getenv("SNARKTOR_API_HOST", DEFAULT_API_HOST),
            api_port=api_port,
            log_level=log_level_from_env(),
            rpc_timeout=rpc_timeout,
        )
