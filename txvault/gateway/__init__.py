"""txvault gateway - FastAPI server, config, and middleware."""

from txvault.gateway.app import create_app
from txvault.gateway.config import TxVaultConfig, load_config

__all__ = ["create_app", "TxVaultConfig", "load_config"]
