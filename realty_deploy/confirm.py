import sys
from collections import OrderedDict

from ape.utils import ZERO_ADDRESS


def _ask(question: str) -> None:
    """Exits the process unless the user answers yes."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        sys.exit(1)


def confirm_start(unit_count: int) -> None:
    _ask(f"Deploy {unit_count} contract(s)?")


def confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the user to confirm the resolved initializer parameters of one unit."""
    if not resolved_params:
        print(f"\n(i) No initializer parameters for {contract_name}")
    else:
        print(f"\nInitializer parameters for {contract_name}")
        for name, resolved_value in resolved_params.items():
            print(f"\t{name}={resolved_value}")

    _ask(f"Deploy {contract_name} behind a UUPS proxy?")
    if ZERO_ADDRESS in resolved_params.values():
        _ask("Zero Address detected for initializer parameter; Continue?")
