import typing
from typing import Any, Dict, List, Sequence

from ape.api import AccountAPI
from ape.exceptions import ApeException, TransactionNotFoundError
from eth_abi import is_encodable
from eth_typing import ChecksumAddress
from web3.exceptions import TimeExhausted

from realty_deploy.confirm import confirm_resolution
from realty_deploy.constants import INITIALIZER_NAME, PROXY_CONTRACT_NAME
from realty_deploy.exceptions import DeploymentFailed, DeploymentTimeout
from realty_deploy.manifest import DeploymentUnit
from realty_deploy.utils import get_contract_container, get_proxy_container, verify_contracts


class DeploymentResult(typing.NamedTuple):
    unit_name: str
    proxy_address: ChecksumAddress
    implementation_address: ChecksumAddress


def _validate_initializer_args(method_abis: List[Any], args: Sequence[Any]) -> Dict[str, Any]:
    """Validates the initializer arguments against the initializer ABI(s)."""
    if len(method_abis) == 0:
        raise ValueError(f"Contract has no '{INITIALIZER_NAME}' method")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    mismatch = None
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not is_encodable(abi_input.canonical_type, arg):
                mismatch = (
                    f"'{abi_input.name}' value {arg!r} is not a valid {abi_input.canonical_type}"
                )
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    if len(abis_matching_args_length) == 1:
        raise ValueError(f"Invalid '{INITIALIZER_NAME}' argument: {mismatch}")
    raise ValueError(
        f"Could not find ABI for '{INITIALIZER_NAME}' with {len(args)} arg(s) and given type(s)"
    )


class ProxyDeployer:
    """
    Deploys manifest units behind UUPS proxies from a single ape account.

    Each unit costs two transactions: the implementation contract, then an
    ERC1967 proxy whose constructor delegates the encoded initializer call,
    so a proxy never exists uninitialized.
    """

    def __init__(self, account: AccountAPI, verify: bool = False, autosign: bool = True):
        self._account = account
        self.verify = verify
        self.autosign = autosign

    def get_account(self) -> AccountAPI:
        return self._account

    def preflight(self, units: Sequence[DeploymentUnit]) -> None:
        """Checks every unit against its artifact before any transaction is sent."""
        print("Validating initializer parameters...")
        for unit in units:
            try:
                container = get_contract_container(unit.name)
                if container.constructor.abi.inputs:
                    raise ValueError("UUPS implementations cannot take constructor arguments")
                method_abis = [
                    abi
                    for abi in container.contract_type.methods
                    if abi.name == INITIALIZER_NAME
                ]
                _validate_initializer_args(method_abis, list(unit.args.values()))
            except ValueError as e:
                raise DeploymentFailed(unit.name, e) from e

    def deploy(self, unit: DeploymentUnit) -> DeploymentResult:
        """
        Deploys one unit and blocks until both transactions are confirmed.
        Not idempotent: every call creates a new proxy.
        """
        try:
            container = get_contract_container(unit.name)
            if not self.autosign:
                confirm_resolution(unit.args, unit.name)

            implementation = self._account.deploy(container)
            initializer = getattr(implementation, INITIALIZER_NAME)
            data = initializer.encode_input(*unit.args.values())

            print(f"\nDeploying {PROXY_CONTRACT_NAME} to proxy {unit.name}.")
            proxy = self._account.deploy(get_proxy_container(), implementation.address, data)
        except (TransactionNotFoundError, TimeExhausted) as e:
            raise DeploymentTimeout(unit.name, e) from e
        except (ApeException, ValueError) as e:
            raise DeploymentFailed(unit.name, e) from e

        return DeploymentResult(
            unit_name=unit.name,
            proxy_address=proxy.address,
            implementation_address=implementation.address,
        )

    def finalize(self, results: List[DeploymentResult]) -> None:
        """Optionally publishes the implementation sources to the block explorer."""
        if self.verify:
            verify_contracts([result.implementation_address for result in results])
