from ape import accounts
from ape.api import AccountAPI
from ape_accounts import import_account_from_private_key
from eth_account import Account
from eth_typing import ChecksumAddress

from realty_deploy.config import NetworkConfig
from realty_deploy.exceptions import ConfigurationError, NoSignerConfigured


def current_signer(config: NetworkConfig) -> ChecksumAddress:
    """Returns the address that signs and pays for deployment transactions."""
    if not config.private_key:
        raise NoSignerConfigured("No signing key configured.")
    try:
        return Account.from_key(config.private_key).address
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Configured signing key is malformed: {e}")


def load_account(config: NetworkConfig) -> AccountAPI:
    """
    Returns the ape account holding the configured signing key, importing it
    under the configured alias on first use. Autosign is enabled so the batch
    runs without per-transaction prompts.
    """
    config.require("private_key", "passphrase")
    signer = current_signer(config)

    if config.account_alias in accounts.aliases:
        account = accounts.load(config.account_alias)
        if account.address != signer:
            raise ConfigurationError(
                f"Account alias '{config.account_alias}' holds {account.address}, "
                f"not the configured signer {signer}."
            )
    else:
        account = import_account_from_private_key(
            config.account_alias, config.passphrase, config.private_key
        )
        print(f"Account imported: {account.address}")

    account.set_autosign(True, passphrase=config.passphrase)
    return account
