import typing
from collections import OrderedDict
from contextlib import contextmanager
from types import SimpleNamespace

import pytest
from ape.exceptions import ProviderError
from eth_utils import to_checksum_address

from realty_deploy import driver
from realty_deploy.constants import INITIALIZER_NAME, PROXY_CONTRACT_NAME
from realty_deploy.manifest import DeploymentUnit, Identities

# Common constants
DEPLOYER = to_checksum_address("0x2467bee786acdd26d9bcd7759c8464463fd33549")
FEE_COLLECTOR = to_checksum_address("0x2467bee786acdd26d9bcd7759c8464463fd33549")
SIGNER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SIGNER_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

REALTY_CONTRACTS = [
    "Mortgage",
    "DisputeResolution",
    "FractionalOwnership",
    "Crowdfunding",
    "Lease",
    "TitleRegistry",
    "MultiEscrowManager",
    "PropertyManagement",
    "SalesEscrow",
]

# initializer signatures matching constructor_params/realty.yml
REALTY_INITIALIZERS = {
    "Mortgage": [("_feeBasisPoints", "uint256")],
    "DisputeResolution": [("_disputeFee", "uint256")],
    "FractionalOwnership": [
        ("_name", "string"),
        ("_symbol", "string"),
        ("_propertyAddress", "string"),
        ("_totalShares", "uint256"),
        ("_sharePrice", "uint256"),
        ("_feeBasisPoints", "uint256"),
        ("_feeCollector", "address"),
    ],
    "Crowdfunding": [("_feeCollector", "address"), ("_feeBasisPoints", "uint256")],
    "Lease": [("_listingFee", "uint256")],
    "TitleRegistry": [("_registrationFee", "uint256"), ("_feeCollector", "address")],
    "MultiEscrowManager": [
        ("_feeCollector", "address"),
        ("_feeBasisPoints", "uint256"),
        ("_disputeFeeBasisPoints", "uint256"),
        ("_termsHash", "bytes32"),
    ],
    "PropertyManagement": [("_feeBasisPoints", "uint256")],
    "SalesEscrow": [("_feeBasisPoints", "uint256"), ("_feeCollector", "address")],
}


# Fakes standing in for ape containers, instances and accounts


class FakeABIInput(typing.NamedTuple):
    name: str
    canonical_type: str


class FakeMethodABI(typing.NamedTuple):
    name: str
    inputs: list


class FakeContainer:
    def __init__(self, name, initializer=None, constructor=None, has_initializer=True):
        methods = list()
        if has_initializer:
            inputs = [FakeABIInput(n, t) for n, t in (initializer or [])]
            methods.append(FakeMethodABI(INITIALIZER_NAME, inputs))
        constructor_inputs = [FakeABIInput(n, t) for n, t in (constructor or [])]
        self.contract_type = SimpleNamespace(name=name, methods=methods)
        self.constructor = SimpleNamespace(abi=SimpleNamespace(inputs=constructor_inputs))


class FakeInitializer:
    def __init__(self, contract_name):
        self.contract_name = contract_name

    def encode_input(self, *args):
        return f"{self.contract_name}.initialize{args}".encode()


class FakeInstance:
    def __init__(self, address, contract_name):
        self.address = address
        self.initialize = FakeInitializer(contract_name)


class FakeAccount:
    """Deploys nothing; hands out sequential addresses and records every deployment."""

    def __init__(self, address=SIGNER_ADDRESS):
        self.address = address
        self.deployments = list()
        self.reverting = dict()  # contract name -> error raised by its initializer
        self.failing = dict()  # contract name -> error raised deploying its implementation
        self._names = dict()

    def deploy(self, container, *args, **kwargs):
        name = container.contract_type.name
        if name in self.failing:
            raise self.failing[name]
        if name == PROXY_CONTRACT_NAME:
            target = self._names[args[0]]
            if target in self.reverting:
                raise self.reverting[target]
        address = to_checksum_address(f"0x{len(self.deployments) + 1:040x}")
        self._names[address] = name
        self.deployments.append((name, args))
        return FakeInstance(address, name)

    @property
    def deployed_names(self):
        return [name for name, _ in self.deployments]


class FakeNetworks:
    def __init__(self):
        self.choices = list()

    @contextmanager
    def _connect(self):
        yield SimpleNamespace(network=SimpleNamespace(name="mainnet", chain_id=1))

    def parse_network_choice(self, choice):
        self.choices.append(choice)
        return self._connect()


def make_unit(name, *values):
    args = OrderedDict((f"arg{i}", value) for i, value in enumerate(values))
    return DeploymentUnit(name=name, args=args)


def initializer_revert(message="execution reverted"):
    return ProviderError(message)


# Fixtures


@pytest.fixture
def identities():
    return Identities(deployer=DEPLOYER, fee_collector=FEE_COLLECTOR)


@pytest.fixture
def account():
    return FakeAccount()


@pytest.fixture
def containers():
    return {
        name: FakeContainer(name, initializer=inputs)
        for name, inputs in REALTY_INITIALIZERS.items()
    }


@pytest.fixture
def fake_project(monkeypatch, containers):
    """Serves the fake containers in place of the ape project artifacts."""
    proxy_container = FakeContainer(PROXY_CONTRACT_NAME, has_initializer=False)

    def get_contract_container(contract):
        try:
            return containers[contract]
        except KeyError:
            raise ValueError(f"No contract found with name '{contract}'.")

    monkeypatch.setattr(driver, "get_contract_container", get_contract_container)
    monkeypatch.setattr(driver, "get_proxy_container", lambda: proxy_container)
    return containers


@pytest.fixture
def deployer(account, fake_project):
    return driver.ProxyDeployer(account=account)
