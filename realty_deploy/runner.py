from typing import Callable, List, Sequence

from realty_deploy.driver import DeploymentResult, ProxyDeployer
from realty_deploy.exceptions import DeploymentFailed
from realty_deploy.manifest import DeploymentUnit


def deploy_all(
    units: Sequence[DeploymentUnit],
    deployer: ProxyDeployer,
    echo: Callable[[str], None] = print,
) -> List[DeploymentResult]:
    """
    Deploys the units one at a time, in manifest order.

    The first failure stops the batch: the remaining units are never
    attempted and the results confirmed so far are attached to the raised
    DeploymentFailed. Confirmed deployments are never rolled back.
    """
    results = list()
    for unit in units:
        try:
            result = deployer.deploy(unit)
        except DeploymentFailed as e:
            e.results = list(results)
            raise
        results.append(result)
        echo(f"{result.unit_name} deployed to: {result.proxy_address}")
    return results
