import os
import typing
from typing import Mapping, Optional

from realty_deploy.constants import (
    ACCOUNT_ALIAS_ENVVAR,
    DEFAULT_ACCOUNT_ALIAS,
    DEFAULT_NETWORK,
    ETHERSCAN_API_KEY_ENVVAR,
    NETWORK_ENVVAR,
    PASSPHRASE_ENVVAR,
    PRIVATE_KEY_ENVVAR,
    RPC_URL_ENVVAR,
)
from realty_deploy.exceptions import ConfigurationError


class NetworkConfig(typing.NamedTuple):
    """Network and credential settings, read once at process start."""

    rpc_url: Optional[str]
    private_key: Optional[str]
    passphrase: Optional[str]
    explorer_api_key: Optional[str]
    network: str = DEFAULT_NETWORK
    account_alias: str = DEFAULT_ACCOUNT_ALIAS

    ENVVARS = {
        "rpc_url": RPC_URL_ENVVAR,
        "private_key": PRIVATE_KEY_ENVVAR,
        "passphrase": PASSPHRASE_ENVVAR,
        "explorer_api_key": ETHERSCAN_API_KEY_ENVVAR,
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NetworkConfig":
        environ = os.environ if environ is None else environ
        return cls(
            rpc_url=environ.get(RPC_URL_ENVVAR) or None,
            private_key=environ.get(PRIVATE_KEY_ENVVAR) or None,
            passphrase=environ.get(PASSPHRASE_ENVVAR) or None,
            explorer_api_key=environ.get(ETHERSCAN_API_KEY_ENVVAR) or None,
            network=environ.get(NETWORK_ENVVAR) or DEFAULT_NETWORK,
            account_alias=environ.get(ACCOUNT_ALIAS_ENVVAR) or DEFAULT_ACCOUNT_ALIAS,
        )

    def require(self, *fields: str) -> None:
        """Raises a single ConfigurationError naming every missing variable."""
        missing = [self.ENVVARS[field] for field in fields if not getattr(self, field)]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")

    @property
    def network_choice(self) -> str:
        """ape network choice pointing the configured network at the RPC URL."""
        return f"{self.network}:{self.rpc_url}"
