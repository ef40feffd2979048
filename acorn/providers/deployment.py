"""Resource-group scoped ARM template deployments."""
import asyncio
import logging
from typing import Any, Dict, Optional

from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import Deployment, DeploymentMode, DeploymentProperties

from ..auth.models import SubscriptionItem

logger = logging.getLogger(__name__)


def _deploy(subscription: SubscriptionItem, resource_group_name: str, deployment_name: str,
            template: Dict[str, Any], parameters: Dict[str, Any]) -> Optional[str]:
    client = ResourceManagementClient(subscription.session.credential, subscription.subscription_id)
    deployment = Deployment(
        properties=DeploymentProperties(
            mode=DeploymentMode.INCREMENTAL,
            template=template,
            parameters=parameters,
        )
    )
    poller = client.deployments.begin_create_or_update(resource_group_name, deployment_name, deployment)
    result = poller.result()
    return result.id if result else None


async def deploy_template(subscription: SubscriptionItem, resource_group_name: str, deployment_name: str,
                          template: Dict[str, Any], parameters: Dict[str, Any]) -> Optional[str]:
    """Run a template deployment and wait for it to finish.

    Returns:
        Optional[str]: The deployment's resource id
            (``.../Microsoft.Resources/deployments/<deployment_name>``).
    """
    logger.info("Deploying %s to resource group %s", deployment_name, resource_group_name)
    deployment_id = await asyncio.to_thread(
        _deploy, subscription, resource_group_name, deployment_name, template, parameters
    )
    logger.info("Deployment %s finished", deployment_name)
    return deployment_id
