from pathlib import Path
from typing import List

import yaml
from ape import networks, project
from ape.contracts import ContractContainer

from realty_deploy.constants import (
    OZ_DEPENDENCY_NAME,
    OZ_DEPENDENCY_VERSION,
    PROXY_CONTRACT_NAME,
)
from realty_deploy.exceptions import ConfigurationError


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def get_contract_container(contract: str) -> ContractContainer:
    """Returns the compiled artifact of a contract of the root project."""
    try:
        return getattr(project, contract)
    except AttributeError:
        raise ValueError(f"No contract found with name '{contract}'.")


def get_proxy_container() -> ContractContainer:
    """Returns the OpenZeppelin ERC1967 proxy used to wrap UUPS implementations."""
    dependency = project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]
    return getattr(dependency, PROXY_CONTRACT_NAME)


def check_etherscan_plugin(api_key: str) -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    an explorer API key was configured.
    """
    try:
        import ape_etherscan  # noqa: F401
    except ImportError:
        raise ConfigurationError("Please install the ape-etherscan plugin to verify contracts.")
    if not api_key:
        raise ConfigurationError("An explorer API key is required to verify contracts.")


def verify_contracts(addresses: List[str]) -> None:
    explorer = networks.provider.network.explorer
    for address in addresses:
        print(f"(i) Verifying {address}...")
        explorer.publish_contract(address)
