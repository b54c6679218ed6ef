"""TxVault - envelope encryption for transaction payloads."""

from txvault.constants import PROJECT_VERSION as __version__

__all__ = ["__version__"]
