import sys
from pathlib import Path

import click
from ape import networks
from ape.exceptions import ApeException
from dotenv import load_dotenv

from realty_deploy.config import NetworkConfig
from realty_deploy.confirm import confirm_start
from realty_deploy.constants import DEFAULT_MANIFEST_FILEPATH, PROXY_KIND
from realty_deploy.driver import ProxyDeployer
from realty_deploy.exceptions import (
    ConfigurationError,
    DeploymentFailed,
    InvalidAmountFormat,
    NoSignerConfigured,
)
from realty_deploy.manifest import Manifest
from realty_deploy.runner import deploy_all
from realty_deploy.signer import current_signer, load_account
from realty_deploy.utils import check_etherscan_plugin


def _fail(message: str) -> None:
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _print_deployment_info(account, provider, manifest_filepath, manifest, verify):
    print(
        f"Account: {account.address}",
        f"Manifest: {manifest_filepath}",
        f"Units: {len(manifest)}",
        f"Proxy: {PROXY_KIND}",
        f"Verify: {verify}",
        f"Network: {provider.network.name}",
        f"Chain ID: {provider.network.chain_id}",
        sep="\n",
    )


@click.group()
def cli():
    """Deploy the RealtyArmy upgradeable contracts."""
    load_dotenv()


@cli.command("deploy-all")
@click.option(
    "--manifest",
    "-m",
    "manifest_filepath",
    help="Deployment manifest YAML",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_MANIFEST_FILEPATH,
    show_default=True,
)
@click.option("--verify/--no-verify", default=False, help="Publish implementation sources.")
@click.option(
    "--autosign/--confirm",
    default=True,
    help="Deploy without prompting, or confirm each unit's resolved arguments.",
)
def deploy_all_command(manifest_filepath, verify, autosign):
    """Deploy every manifest unit behind a UUPS proxy, in order."""
    config = NetworkConfig.from_env()
    required = ["rpc_url", "private_key", "passphrase"]
    if verify:
        required.append("explorer_api_key")

    try:
        config.require(*required)
        manifest = Manifest.from_yaml(manifest_filepath)
        if verify:
            check_etherscan_plugin(config.explorer_api_key)
        identities = manifest.get_identities(signer=current_signer(config))
        units = manifest.resolve(identities)
    except (ConfigurationError, InvalidAmountFormat) as e:
        _fail(f"Configuration error: {e}")

    try:
        with networks.parse_network_choice(config.network_choice) as provider:
            account = load_account(config)
            deployer = ProxyDeployer(account=account, verify=verify, autosign=autosign)
            _print_deployment_info(account, provider, manifest_filepath, manifest, verify)
            deployer.preflight(units)
            if not autosign:
                confirm_start(len(units))

            results = deploy_all(units, deployer, echo=click.echo)
            deployer.finalize(results)
    except DeploymentFailed as e:
        _fail(f"Deployment failed: {e.unit_name}: {e.cause}")
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")
    except ApeException as e:
        _fail(f"Network error: {e}")


@cli.command()
def signer():
    """Print the address that signs deployment transactions."""
    config = NetworkConfig.from_env()
    try:
        address = current_signer(config)
    except (NoSignerConfigured, ConfigurationError) as e:
        _fail(str(e))
    click.echo(f"Deployer address: {address}")


if __name__ == "__main__":
    cli()
