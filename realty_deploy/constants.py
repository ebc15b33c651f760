from pathlib import Path

import realty_deploy

#
# Filesystem
#

PACKAGE_DIR = Path(realty_deploy.__file__).parent
CONSTRUCTOR_PARAMS_DIR = PACKAGE_DIR / "constructor_params"
DEFAULT_MANIFEST_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "realty.yml"

#
# Environment
#

RPC_URL_ENVVAR = "MAINNET_RPC_URL"
PRIVATE_KEY_ENVVAR = "PRIVATE_KEY"
PASSPHRASE_ENVVAR = "DEPLOYER_PASSPHRASE"
ETHERSCAN_API_KEY_ENVVAR = "ETHERSCAN_API_KEY"
NETWORK_ENVVAR = "DEPLOY_NETWORK"
ACCOUNT_ALIAS_ENVVAR = "DEPLOYER_ACCOUNT_ALIAS"

DEFAULT_NETWORK = "ethereum:mainnet"
DEFAULT_ACCOUNT_ALIAS = "realty-deployer"

#
# Amounts
#

ETHER_DECIMALS = 18
UINT256_MAX = 2**256 - 1

#
# Contracts
#

# UUPS: the proxy only stores the implementation address (EIP-1967 slot),
# upgrade authorization lives in the implementation.
PROXY_KIND = "uups"
PROXY_CONTRACT_NAME = "ERC1967Proxy"
INITIALIZER_NAME = "initialize"

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "5.0.0"
