import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from realty_deploy.constants import ETHER_DECIMALS
from realty_deploy.derive import derive_amount, terms_hash
from realty_deploy.exceptions import ConfigurationError, InvalidAmountFormat
from realty_deploy.utils import _load_yaml

CONTRACT_INITIALIZER_PARAMETER_KEY = "initializer"

DerivedValue = typing.Union[int, bytes]


class Identities(typing.NamedTuple):
    """Well-known participant addresses referenced by the manifest."""

    deployer: ChecksumAddress
    fee_collector: ChecksumAddress


class DeploymentUnit(typing.NamedTuple):
    """A contract to deploy and the ordered arguments of its initializer."""

    name: str
    args: OrderedDict


# Arguments


class Argument(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, derived: Dict[str, DerivedValue], identities: Identities) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        return isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)


class Literal(Argument):
    def __init__(self, value: Any):
        self.value = value

    def resolve(self, derived, identities) -> Any:
        return self.value

    def __repr__(self):
        return f"Literal({self.value!r})"


class DerivedRef(Argument):
    def __init__(self, name: str, derived: Dict[str, DerivedValue]):
        if name not in derived:
            raise Manifest.Invalid(f"Derived value '{name}' not found in manifest.")
        self.name = name

    @classmethod
    def is_derived(cls, value: str) -> bool:
        """Returns True if the variable names a derived value."""
        return value.isupper()

    def resolve(self, derived, identities) -> DerivedValue:
        return derived[self.name]

    def __repr__(self):
        return f"DerivedRef({self.name})"


class IdentityRef(Argument):
    ROLES = Identities._fields

    def __init__(self, role: str):
        if role not in self.ROLES:
            raise Manifest.Invalid(
                f"Unknown identity '{role}', expected one of {', '.join(self.ROLES)}."
            )
        self.role = role

    @classmethod
    def is_identity(cls, value: str) -> bool:
        return value in cls.ROLES

    def resolve(self, derived, identities) -> ChecksumAddress:
        return getattr(identities, self.role)

    def __repr__(self):
        return f"IdentityRef({self.role})"


def _argument_from_value(value: Any, derived: Dict[str, DerivedValue]) -> Argument:
    if not Argument.is_variable(value):
        return Literal(value)

    variable = value[len(Argument.VARIABLE_PREFIX) :]
    if IdentityRef.is_identity(variable):
        return IdentityRef(variable)
    elif DerivedRef.is_derived(variable):
        return DerivedRef(variable, derived)
    raise Manifest.Invalid(f"Variable {value} is not resolvable.")


def _amount_text(name: str, amount: Any) -> str:
    # YAML already turned unquoted decimals into floats, which may have lost digits
    if isinstance(amount, int) and not isinstance(amount, bool):
        return str(amount)
    if not isinstance(amount, str):
        raise InvalidAmountFormat(
            f"Amount of '{name}' must be quoted in the manifest, got {amount!r}"
        )
    return amount


def _decimals(name: str, derivation: Dict) -> int:
    decimals = derivation.get("decimals", ETHER_DECIMALS)
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise Manifest.Invalid(
            f"Decimals of '{name}' must be a non-negative integer, got {decimals!r}."
        )
    return decimals


def _derive_value(name: str, derivation: Any) -> DerivedValue:
    if not isinstance(derivation, dict) or not derivation:
        raise Manifest.Invalid(f"Malformed derived value '{name}'.")
    if "ether" in derivation:
        return derive_amount(_amount_text(name, derivation["ether"]), ETHER_DECIMALS)
    if "units" in derivation:
        decimals = _decimals(name, derivation)
        return derive_amount(_amount_text(name, derivation["units"]), decimals)
    if "keccak" in derivation:
        return terms_hash(derivation["keccak"])
    raise Manifest.Invalid(f"Unknown derivation for '{name}': {', '.join(derivation)}.")


def _derive_values(config: Dict) -> Dict[str, DerivedValue]:
    derived = OrderedDict()
    for name, derivation in (config.get("derived") or dict()).items():
        if not name.isupper():
            raise Manifest.Invalid(f"Derived value names must be upper case, got '{name}'.")
        derived[name] = _derive_value(name, derivation)
    return derived


def _identity_addresses(config: Dict) -> Dict[str, ChecksumAddress]:
    addresses = dict()
    for role, address in (config.get("identities") or dict()).items():
        if role not in IdentityRef.ROLES:
            raise Manifest.Invalid(f"Unknown identity '{role}'.")
        try:
            addresses[role] = to_checksum_address(address)
        except (ValueError, TypeError):
            raise Manifest.Invalid(f"Identity '{role}' is not a valid address: {address}")
    return addresses


class Manifest:
    """An ordered list of deployment units; list order is deployment order."""

    class Invalid(ConfigurationError):
        """Raised when the manifest is malformed"""

    def __init__(
        self,
        units: typing.Sequence[DeploymentUnit],
        derived: Dict[str, DerivedValue],
        identities: Optional[Dict[str, ChecksumAddress]] = None,
        name: str = "",
    ):
        self.units = tuple(units)
        self.derived = derived
        self.identities = identities or dict()
        self.name = name

    def __iter__(self):
        return iter(self.units)

    def __len__(self):
        return len(self.units)

    @classmethod
    def from_yaml(cls, filepath: Path) -> "Manifest":
        try:
            config = _load_yaml(filepath)
        except yaml.YAMLError as e:
            raise cls.Invalid(f"Malformed manifest at {filepath}: {e}")
        if not isinstance(config, dict):
            raise cls.Invalid(f"Malformed manifest at {filepath}.")
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: Dict) -> "Manifest":
        """Builds the manifest, computing every derived value once."""
        print("Processing manifest...")
        contracts = config.get("contracts")
        if not contracts:
            raise cls.Invalid("Manifest missing 'contracts' field.")

        derived = _derive_values(config)
        units = list()
        for contract_info in contracts:
            if isinstance(contract_info, str):
                units.append(DeploymentUnit(name=contract_info, args=OrderedDict()))
            elif isinstance(contract_info, dict) and len(contract_info) == 1:
                contract_name = list(contract_info.keys())[0]  # only one entry
                contract_data = contract_info[contract_name] or dict()
                args = cls._process_parameters(contract_name, contract_data, derived)
                units.append(DeploymentUnit(name=contract_name, args=args))
            else:
                raise cls.Invalid("Malformed contracts entry in manifest.")

        deployment = config.get("deployment") or dict()
        return cls(
            units=units,
            derived=derived,
            identities=_identity_addresses(config),
            name=deployment.get("name", ""),
        )

    @classmethod
    def _process_parameters(cls, contract_name, contract_data, derived) -> OrderedDict:
        if not isinstance(contract_data, dict):
            raise cls.Invalid(f"Malformed manifest entry for {contract_name}.")
        raw_values = contract_data.get(CONTRACT_INITIALIZER_PARAMETER_KEY) or dict()
        if not isinstance(raw_values, dict):
            raise cls.Invalid(f"Initializer parameters of {contract_name} must be a mapping.")
        return OrderedDict(
            (name, _argument_from_value(value, derived)) for name, value in raw_values.items()
        )

    def get_identities(self, signer: Optional[ChecksumAddress] = None) -> Identities:
        """
        Returns the manifest identities; the deployer identity
        falls back to the signing account when not declared.
        """
        deployer = self.identities.get("deployer", signer)
        fee_collector = self.identities.get("fee_collector")
        if deployer is None or fee_collector is None:
            raise self.Invalid("Manifest must declare the deployer and fee_collector identities.")
        return Identities(deployer=deployer, fee_collector=fee_collector)

    def resolve(self, identities: Identities) -> List[DeploymentUnit]:
        """Resolves every argument of every unit to a concrete value."""
        resolved_units = list()
        for unit in self.units:
            resolved_args = OrderedDict(
                (name, argument.resolve(self.derived, identities))
                for name, argument in unit.args.items()
            )
            resolved_units.append(unit._replace(args=resolved_args))
        return resolved_units
