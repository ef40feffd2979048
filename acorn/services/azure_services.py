"""Routes wizard commands to Azure providers and sequences deployments."""
import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..auth.azure_auth import AzureAuth
from ..auth.models import SubscriptionItem
from ..config import AcornSettings
from ..constants import (
    BACKEND_FRAMEWORK_LINUX_VERSION,
    AzureResourceType,
    DialogMessages,
    Errors,
    Info,
    SkuDescriptions,
)
from ..errors import AuthorizationError, DeploymentError, SubscriptionError, UnknownCommandError, ValidationError
from ..naming.connection_string import ConnectionString
from ..naming.generator import NameGenerator
from ..naming.validator import NameValidationResult, NameValidator, is_name_available
from ..prompts import ConsolePrompter, Prompter
from ..providers.app_service import AppServiceProvider
from ..providers.cosmos import CosmosDBDeploy
from ..providers.functions import FunctionProvider
from ..providers.models import (
    AppServiceSelections,
    CosmosDBSelections,
    DatabaseObject,
    FunctionSelections,
    ResourceGroupSelection,
)
from ..providers.resource_group import ResourceGroupDeploy
from ..selections.schema import CosmosInput, DeploymentPayload, FunctionsInput
from .cache import SubscriptionCache
from .commands import ExtensionCommand, WizardMessage, payload_response
from .state import DeploymentStage, DeploymentTracker

logger = logging.getLogger(__name__)

ErrorObserver = Callable[[str, BaseException], None]
CommandHandler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]

MS_RESOURCE_DEPLOYMENT = "Microsoft.Resources/deployments"
MS_WEB_SITE = "Microsoft.Web/sites"


@dataclass
class DeploymentResult:
    """What a full deployment produced."""
    resource_groups: List[ResourceGroupSelection] = field(default_factory=list)
    web_app_id: Optional[str] = None
    function_app_id: Optional[str] = None
    database: Optional[DatabaseObject] = None
    env_replaced: bool = False
    stages: Dict[str, str] = field(default_factory=dict)


def _log_error(operation: str, error: BaseException) -> None:
    logger.error("%s failed: %s", operation, error)


class AzureServices:
    """Orchestrator for one signed-in session.

    Owns the session's subscription list and per-kind subscription cache.
    Errors are never handled here: each public operation reports the error to
    ``error_observer`` and re-raises it unchanged.
    """

    def __init__(self, auth: AzureAuth, settings: Optional[AcornSettings] = None,
                 app_service_provider: Optional[AppServiceProvider] = None,
                 cosmos_provider: Optional[CosmosDBDeploy] = None,
                 function_provider: Optional[FunctionProvider] = None,
                 resource_group_provider: Optional[ResourceGroupDeploy] = None,
                 prompter: Optional[Prompter] = None,
                 error_observer: Optional[ErrorObserver] = None):
        self.auth = auth
        self.settings = settings or AcornSettings()
        templates_dir = self.settings.arm_templates_dir
        self.app_service_provider = app_service_provider or AppServiceProvider(templates_dir)
        self.cosmos_provider = cosmos_provider or CosmosDBDeploy(templates_dir)
        self.function_provider = function_provider or FunctionProvider(templates_dir)
        self.resource_group_provider = resource_group_provider or ResourceGroupDeploy()
        self.prompter = prompter or ConsolePrompter()
        self.error_observer = error_observer or _log_error

        self.cache = SubscriptionCache()
        self.tracker = DeploymentTracker()

        self.client_command_map: Dict[ExtensionCommand, CommandHandler] = {
            ExtensionCommand.LOGIN: self.perform_login_for_subscriptions,
            ExtensionCommand.GET_USER_STATUS: self.send_user_status_if_logged_in,
            ExtensionCommand.LOGOUT: self.perform_logout,
            ExtensionCommand.GET_SUBSCRIPTION_DATA_FOR_APP_SERVICE: self.send_app_service_subscription_data_to_client,
            ExtensionCommand.GET_SUBSCRIPTION_DATA_FOR_COSMOS: self.send_cosmos_subscription_data_to_client,
            ExtensionCommand.GET_SUBSCRIPTION_DATA_FOR_FUNCTIONS: self.send_functions_subscription_data_to_client,
            ExtensionCommand.GET_VALID_APP_SERVICE_NAME: self.get_valid_app_service_name,
            ExtensionCommand.GET_VALID_COSMOS_NAME: self.get_valid_cosmos_name,
            ExtensionCommand.GET_VALID_FUNCTIONS_NAME: self.get_valid_functions_name,
            ExtensionCommand.NAME_APP_SERVICE: self.send_app_service_name_validation_status_to_client,
            ExtensionCommand.NAME_COSMOS: self.send_cosmos_name_validation_status_to_client,
            ExtensionCommand.NAME_FUNCTIONS: self.send_function_name_validation_status_to_client,
        }

    @contextmanager
    def _observe(self, operation: str, kind: Optional[AzureResourceType] = None):
        try:
            yield
        except Exception as error:
            if kind is not None:
                self.tracker.fail(kind)
            self.error_observer(operation, error)
            raise

    async def handle(self, command: str, message: Dict[str, Any]) -> Dict[str, Any]:
        """Dispatch a command to its handler.

        Raises:
            UnknownCommandError: If no handler is registered for the command.
        """
        try:
            handler = self.client_command_map[ExtensionCommand(command)]
        except (KeyError, ValueError):
            raise UnknownCommandError(command) from None
        return await handler(message)

    def is_microsoft_learn_subscription(self, subscription: SubscriptionItem) -> bool:
        return subscription.session.tenant_id in self.settings.microsoft_learn_tenants

    # Session

    async def perform_login_for_subscriptions(self, message: Dict[str, Any]) -> Dict[str, Any]:
        with self._observe("login"):
            logger.info("Attempt to log user in")
            if not await self.auth.login():
                raise AuthorizationError(Errors.LOGIN_TIMEOUT)
        logger.info("User logged in")
        return await self.send_user_status_if_logged_in(message)

    async def send_user_status_if_logged_in(self, message: Dict[str, Any]) -> Dict[str, Any]:
        msg = WizardMessage.model_validate(message)
        email = self.auth.get_email()
        if not email:
            return payload_response(None)

        with self._observe("get_user_status"):
            self.cache.replace_subscriptions(await self.auth.get_subscriptions())
        subscriptions = [
            {
                "label": subscription.label,
                "value": subscription.label,
                "isMicrosoftLearnSubscription": self.is_microsoft_learn_subscription(subscription),
            }
            for subscription in self.cache.subscriptions
        ]
        return payload_response({
            "scope": msg.scope,
            "email": email,
            "subscriptions": subscriptions,
        })

    async def perform_logout(self, message: Dict[str, Any]) -> Dict[str, Any]:
        msg = WizardMessage.model_validate(message)
        with self._observe("logout"):
            success = await self.auth.logout()
        self.cache.clear()
        return payload_response({"scope": msg.scope, "success": success})

    # Subscription data

    async def get_subscription_data(self, subscription_label: str, kind: AzureResourceType) -> Dict[str, Any]:
        """Resource groups and locations of a subscription, formatted for the UI."""
        with self._observe("get_subscription_data"):
            subscription = self.cache.find(subscription_label)
            if kind == AzureResourceType.COSMOS:
                get_locations = self.auth.get_locations_for_cosmos
            else:
                get_locations = self.auth.get_locations_for_app
            resource_groups, locations = await asyncio.gather(
                self.auth.get_all_resource_group_items(subscription),
                get_locations(subscription),
            )
        return {
            "resourceGroups": [{"label": group.name, "value": group.name} for group in resource_groups],
            "locations": [
                {"label": location.location_display_name, "value": location.location_display_name}
                for location in locations
            ],
        }

    async def _send_subscription_data(self, message: Dict[str, Any], kind: AzureResourceType) -> Dict[str, Any]:
        msg = WizardMessage.model_validate(message)
        data = await self.get_subscription_data(msg.subscription, kind)
        return payload_response({**data, "scope": msg.scope})

    async def send_app_service_subscription_data_to_client(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_subscription_data(message, AzureResourceType.APP_SERVICE)

    async def send_functions_subscription_data_to_client(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_subscription_data(message, AzureResourceType.FUNCTIONS)

    async def send_cosmos_subscription_data_to_client(self, message: Dict[str, Any]) -> Dict[str, Any]:
        msg = WizardMessage.model_validate(message)
        data = await self.get_subscription_data(msg.subscription, AzureResourceType.COSMOS)
        valid_name = NameGenerator.generate_valid_name(msg.project_name or "", AzureResourceType.COSMOS)
        return payload_response({**data, "validName": valid_name, "scope": msg.scope})

    # Name generation

    async def _send_valid_name(self, message: Dict[str, Any], kind: AzureResourceType) -> Dict[str, Any]:
        msg = WizardMessage.model_validate(message)
        valid_name = NameGenerator.generate_valid_name(msg.project_name or "", kind)
        return payload_response({"validName": valid_name, "scope": msg.scope})

    async def get_valid_app_service_name(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_valid_name(message, AzureResourceType.APP_SERVICE)

    async def get_valid_cosmos_name(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_valid_name(message, AzureResourceType.COSMOS)

    async def get_valid_functions_name(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_valid_name(message, AzureResourceType.FUNCTIONS)

    # Name validation

    async def _check_name(self, kind: AzureResourceType, name: str,
                          subscription: SubscriptionItem) -> Optional[str]:
        if kind == AzureResourceType.APP_SERVICE:
            return await self.app_service_provider.check_web_app_name(name, subscription)
        if kind == AzureResourceType.COSMOS:
            return await self.cosmos_provider.validate_cosmos_db_account_name(name, subscription)
        if kind == AzureResourceType.FUNCTIONS:
            return await self.function_provider.check_function_app_name(name, subscription)
        raise ValueError(f"No name check for {kind.value}")

    async def validate_name(self, kind: AzureResourceType, name: str,
                            subscription_label: str) -> NameValidationResult:
        """Live availability check for a resource name.

        An unavailable name is a normal result, not an error. Only subscription
        resolution and provider failures raise.
        """
        with self._observe(f"validate_{kind.value}_name"):
            subscription = self.cache.ensure(kind, subscription_label)
            invalid_reason = await self._check_name(kind, name, subscription)
        if is_name_available(invalid_reason):
            return NameValidationResult(available=True)
        return NameValidationResult(available=False, reason=invalid_reason)

    async def _send_name_validation(self, message: Dict[str, Any], kind: AzureResourceType) -> Dict[str, Any]:
        msg = WizardMessage.model_validate(message)
        result = await self.validate_name(kind, msg.app_name or "", msg.subscription)
        return payload_response({
            "scope": msg.scope,
            "isAvailable": result.available,
            "reason": result.reason,
        })

    async def send_app_service_name_validation_status_to_client(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_name_validation(message, AzureResourceType.APP_SERVICE)

    async def send_cosmos_name_validation_status_to_client(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_name_validation(message, AzureResourceType.COSMOS)

    async def send_function_name_validation_status_to_client(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send_name_validation(message, AzureResourceType.FUNCTIONS)

    async def _ensure_name_available(self, kind: AzureResourceType, name: str,
                                     subscription: SubscriptionItem) -> None:
        invalid_reason = await self._check_name(kind, name, subscription)
        if not is_name_available(invalid_reason):
            raise ValidationError(invalid_reason)

    # Resource groups

    async def generate_distinct_resource_group_selections(
            self, payload: DeploymentPayload) -> List[ResourceGroupSelection]:
        """One resource group selection per distinct subscription of the selected resources."""
        with self._observe("generate_resource_group_selections"):
            all_subscriptions = []
            if payload.selected_functions:
                all_subscriptions.append(
                    self.cache.ensure(AzureResourceType.FUNCTIONS, payload.functions.subscription))
            if payload.selected_cosmos:
                all_subscriptions.append(
                    self.cache.ensure(AzureResourceType.COSMOS, payload.cosmos.subscription))
            if payload.selected_app_service:
                all_subscriptions.append(
                    self.cache.ensure(AzureResourceType.APP_SERVICE, payload.app_service.subscription))

            # SubscriptionItem hashes by identity
            distinct_subscriptions = list(dict.fromkeys(all_subscriptions))
            generated_name = await self.resource_group_provider.generate_valid_resource_group_name(
                payload.engine.project_name, distinct_subscriptions
            )
            return list(await asyncio.gather(*(
                self._generate_resource_group_selection(generated_name, subscription)
                for subscription in distinct_subscriptions
            )))

    async def _generate_resource_group_selection(self, generated_name: str,
                                                 subscription: SubscriptionItem) -> ResourceGroupSelection:
        resource_group_name = generated_name
        if self.is_microsoft_learn_subscription(subscription):
            resource_groups = await self.resource_group_provider.get_resource_groups(subscription)
            if not resource_groups:
                raise DeploymentError(Errors.NO_RESOURCE_GROUPS_IN_SUBSCRIPTION.format(subscription.label))
            resource_group_name = resource_groups[0].name
        return ResourceGroupSelection(
            subscription_item=subscription,
            resource_group_name=resource_group_name,
            location=self.settings.default_location,
        )

    async def deploy_resource_group(self, selection: ResourceGroupSelection):
        """Create a planned resource group. Sandbox groups already exist and are skipped."""
        if self.is_microsoft_learn_subscription(selection.subscription_item):
            return None
        with self._observe("deploy_resource_group"):
            return await self.resource_group_provider.create_resource_group(selection)

    # Resources

    async def deploy_web_app(self, payload: DeploymentPayload) -> str:
        """Create the web app and return its site resource id."""
        kind = AzureResourceType.APP_SERVICE
        self.tracker.reset(kind)
        with self._observe("deploy_web_app", kind):
            app_service = payload.app_service
            subscription = self.cache.ensure(kind, app_service.subscription)
            self.tracker.advance(kind, DeploymentStage.SUBSCRIPTION_RESOLVED)

            linux_fx_version = BACKEND_FRAMEWORK_LINUX_VERSION.get(payload.engine.backend_framework)
            if linux_fx_version is None:
                raise ValidationError(f"Unsupported backend framework: {payload.engine.backend_framework}")

            plan = (SkuDescriptions.FREE if self.is_microsoft_learn_subscription(subscription)
                    else SkuDescriptions.BASIC)
            selections = AppServiceSelections(
                site_name=app_service.site_name,
                subscription_item=subscription,
                resource_group_item=await self.auth.get_resource_group_item(app_service.resource_group, subscription),
                app_service_plan_name=self.app_service_provider.generate_valid_asp_name(payload.engine.project_name),
                tier=plan.tier,
                sku=plan.name,
                linux_fx_version=linux_fx_version,
                location=self.settings.default_location,
            )

            await self._ensure_name_available(kind, selections.site_name, subscription)
            self.tracker.advance(kind, DeploymentStage.NAME_VALIDATED)

            result = await self.app_service_provider.create_web_app(selections, payload.engine.path)
            if not result:
                raise DeploymentError(Errors.APP_SERVICE_UNDEFINED_ID)
            self.tracker.advance(kind, DeploymentStage.CREATED)
            return self.convert_id(result)

    @staticmethod
    def convert_id(raw_id: str) -> str:
        """Turn a web app deployment id into the web app's site id."""
        # The create call returns the template deployment's id, not the site's
        return (raw_id
                .replace(MS_RESOURCE_DEPLOYMENT, MS_WEB_SITE, 1)
                .replace("-" + AzureResourceType.APP_SERVICE.value, "", 1))

    async def deploy_function_app(self, selections: FunctionsInput, app_path: str) -> str:
        """Create a function app and return the deployment id."""
        kind = AzureResourceType.FUNCTIONS
        self.tracker.reset(kind)
        with self._observe("deploy_function_app", kind):
            subscription = self.cache.ensure(kind, selections.subscription)
            self.tracker.advance(kind, DeploymentStage.SUBSCRIPTION_RESOLVED)

            function_selections = FunctionSelections(
                function_app_name=selections.app_name,
                subscription_item=subscription,
                resource_group_item=await self.auth.get_resource_group_item(selections.resource_group, subscription),
                location=selections.location or self.settings.default_location,
                runtime=selections.runtime_stack,
                function_names=list(selections.function_names),
            )

            function_names_validation = NameValidator.validate_function_names(function_selections.function_names)
            if not function_names_validation.is_valid:
                raise ValidationError(function_names_validation.message)

            await self._ensure_name_available(kind, function_selections.function_app_name, subscription)
            self.tracker.advance(kind, DeploymentStage.NAME_VALIDATED)

            result = await self.function_provider.create_function_app(function_selections, app_path)
            if not result:
                raise DeploymentError(Errors.FUNCTION_APP_UNDEFINED_ID)
            self.tracker.advance(kind, DeploymentStage.CREATED)
            return result

    async def deploy_cosmos_resource(self, selections: CosmosInput, gen_path: str) -> DatabaseObject:
        """Create a Cosmos DB account and return its connection details."""
        kind = AzureResourceType.COSMOS
        self.tracker.reset(kind)
        with self._observe("deploy_cosmos_resource", kind):
            subscription = self.cache.ensure(kind, selections.subscription)
            self.tracker.advance(kind, DeploymentStage.SUBSCRIPTION_RESOLVED)

            cosmos_selections = CosmosDBSelections(
                cosmos_api=selections.api,
                cosmos_db_resource_name=selections.account_name,
                location=selections.location or self.settings.default_location,
                resource_group_item=await self.auth.get_resource_group_item(selections.resource_group, subscription),
                subscription_item=subscription,
            )

            await self._ensure_name_available(kind, cosmos_selections.cosmos_db_resource_name, subscription)
            self.tracker.advance(kind, DeploymentStage.NAME_VALIDATED)

            database = await self.cosmos_provider.create_cosmos_db(cosmos_selections, gen_path)
            if not database or not database.connection_string:
                raise DeploymentError(Errors.COSMOS_UNDEFINED_CONNECTION_STRING)
            self.tracker.advance(kind, DeploymentStage.CREATED)
            return database

    # Post-deployment configuration

    async def prompt_user_for_cosmos_replacement(self, path_to_env: str,
                                                 db_object: DatabaseObject) -> Dict[str, Any]:
        """Ask whether to write the new connection string into the .env file."""
        with self._observe("prompt_user_for_cosmos_replacement"):
            replace = await asyncio.to_thread(
                self.prompter.confirm, DialogMessages.COSMOS_CONNECTION_STRING_REPLACE_PROMPT
            )
            start = time.time()
            if replace:
                self.cosmos_provider.update_connection_string_in_env_file(path_to_env, db_object.connection_string)
                self.prompter.notify(Info.FILE_REPLACED_MESSAGE + path_to_env)
        return {"userReplacedEnv": bool(replace), "startTime": start}

    async def update_app_settings(self, resource_group_name: str, web_app_name: str,
                                  connection_string: str) -> None:
        """Push a database connection string to the web app's settings."""
        with self._observe("update_app_settings", AzureResourceType.APP_SERVICE):
            subscription = self.cache.get(AzureResourceType.APP_SERVICE)
            if subscription is None:
                raise SubscriptionError(Errors.SUBSCRIPTION_NOT_FOUND)
            parsed = ConnectionString.parse_connection_string(connection_string)
            settings = self.convert_to_settings(parsed)
            await self.app_service_provider.update_app_settings(
                subscription, resource_group_name, web_app_name, settings
            )
        for kind in (AzureResourceType.APP_SERVICE, AzureResourceType.COSMOS):
            if self.tracker.stage(kind) == DeploymentStage.CREATED:
                self.tracker.advance(kind, DeploymentStage.CONFIGURED)

    @staticmethod
    def convert_to_settings(parsed_connection_string: str) -> Dict[str, str]:
        """Split ``KEY=value`` lines into a settings dict.

        Values keep any '=' after the first one. The empty segment after the
        final newline is dropped, and lines without '=' are skipped.
        """
        fields = parsed_connection_string.split("\n")
        if fields and fields[-1] == "":
            fields = fields[:-1]
        result = {}
        for line in fields:
            key, sep, value = line.partition("=")
            if sep:
                result[key] = value
        return result

    # Full sequence

    async def deploy(self, payload: DeploymentPayload) -> DeploymentResult:
        """Create every selected resource and wire the database into the web app.

        Resources without an explicit resource group get a generated one,
        shared by all resources on the same subscription.
        """
        result = DeploymentResult()
        payload = await self._assign_resource_groups(payload, result)

        if payload.selected_cosmos:
            logger.info("Deploying Cosmos DB account %s", payload.cosmos.account_name)
            result.database = await self.deploy_cosmos_resource(payload.cosmos, payload.engine.path)

        if payload.selected_app_service:
            logger.info("Deploying web app %s", payload.app_service.site_name)
            result.web_app_id = await self.deploy_web_app(payload)

        if payload.selected_functions:
            logger.info("Deploying function app %s", payload.functions.app_name)
            result.function_app_id = await self.deploy_function_app(payload.functions, payload.engine.path)

        if result.database is not None:
            env_path = payload.engine.env_path or str(Path(payload.engine.path) / self.settings.env_file_name)
            replacement = await self.prompt_user_for_cosmos_replacement(env_path, result.database)
            result.env_replaced = replacement["userReplacedEnv"]
            if result.web_app_id is not None:
                await self.update_app_settings(
                    payload.app_service.resource_group,
                    payload.app_service.site_name,
                    result.database.connection_string,
                )

        result.stages = self.tracker.summary()
        return result

    async def _assign_resource_groups(self, payload: DeploymentPayload,
                                      result: DeploymentResult) -> DeploymentPayload:
        blocks = {
            "app_service": (payload.selected_app_service, payload.app_service, AzureResourceType.APP_SERVICE),
            "cosmos": (payload.selected_cosmos, payload.cosmos, AzureResourceType.COSMOS),
            "functions": (payload.selected_functions, payload.functions, AzureResourceType.FUNCTIONS),
        }
        missing = {name: kind for name, (selected, block, kind) in blocks.items()
                   if selected and not block.resource_group}
        if not missing:
            return payload

        planned = payload.model_copy(update={
            "selected_app_service": "app_service" in missing,
            "selected_cosmos": "cosmos" in missing,
            "selected_functions": "functions" in missing,
        })
        result.resource_groups = await self.generate_distinct_resource_group_selections(planned)
        for selection in result.resource_groups:
            logger.info("Using resource group %s in %s", selection.resource_group_name,
                        selection.subscription_item.label)
            await self.deploy_resource_group(selection)

        by_subscription = {s.subscription_item: s.resource_group_name for s in result.resource_groups}
        updates = {}
        for name, kind in missing.items():
            block = blocks[name][1]
            group = by_subscription[self.cache.ensure(kind, block.subscription)]
            updates[name] = block.model_copy(update={"resource_group": group})
        return payload.model_copy(update=updates)
