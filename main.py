"""Project Acorn CLI entrypoint."""
import asyncio
import sys
from typing import Optional

import typer
import yaml
from azure.core.exceptions import AzureError
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from acorn.auth.azure_auth import AzureAuth
from acorn.config import load_settings
from acorn.constants import AzureResourceType
from acorn.errors import AcornError, AuthorizationError
from acorn.log import configure_logging
from acorn.prompts import ConsolePrompter
from acorn.selections.parser import SelectionsParser
from acorn.services.azure_services import AzureServices
from acorn.services.commands import ExtensionCommand

app = typer.Typer(help="Project Acorn - provision Azure resources for a generated web project")
console = Console()

NAME_KINDS = {
    "appservice": AzureResourceType.APP_SERVICE,
    "cosmos": AzureResourceType.COSMOS,
    "functions": AzureResourceType.FUNCTIONS,
}

SUBSCRIPTION_DATA_COMMANDS = {
    AzureResourceType.APP_SERVICE: ExtensionCommand.GET_SUBSCRIPTION_DATA_FOR_APP_SERVICE,
    AzureResourceType.COSMOS: ExtensionCommand.GET_SUBSCRIPTION_DATA_FOR_COSMOS,
    AzureResourceType.FUNCTIONS: ExtensionCommand.GET_SUBSCRIPTION_DATA_FOR_FUNCTIONS,
}

VALID_NAME_COMMANDS = {
    AzureResourceType.APP_SERVICE: ExtensionCommand.GET_VALID_APP_SERVICE_NAME,
    AzureResourceType.COSMOS: ExtensionCommand.GET_VALID_COSMOS_NAME,
    AzureResourceType.FUNCTIONS: ExtensionCommand.GET_VALID_FUNCTIONS_NAME,
}

NAME_COMMANDS = {
    AzureResourceType.APP_SERVICE: ExtensionCommand.NAME_APP_SERVICE,
    AzureResourceType.COSMOS: ExtensionCommand.NAME_COSMOS,
    AzureResourceType.FUNCTIONS: ExtensionCommand.NAME_FUNCTIONS,
}

ConfigOption = typer.Option(None, "--config", "-c", help="Path to the acorn.yaml settings file")
DebugOption = typer.Option(False, "--debug", help="Print verbose debug information")


def _services(config: Optional[str], debug: bool, assume_yes: bool = False) -> AzureServices:
    configure_logging(debug)
    settings = load_settings(config)
    return AzureServices(
        AzureAuth(settings),
        settings=settings,
        prompter=ConsolePrompter(console, assume_yes=assume_yes),
    )


def _kind(kind: str) -> AzureResourceType:
    try:
        return NAME_KINDS[kind.lower()]
    except KeyError:
        raise typer.BadParameter(f"Resource kind must be one of: {', '.join(NAME_KINDS)}")


async def _load_subscriptions(services: AzureServices) -> None:
    response = await services.handle(ExtensionCommand.GET_USER_STATUS, {})
    if response["payload"] is None:
        raise AuthorizationError("Not logged in. Run 'login' first.")


def _run(coro) -> None:
    """Run a command coroutine, reporting failures the way every command does."""
    try:
        asyncio.run(coro)
    except (AcornError, AzureError, PydanticValidationError, yaml.YAMLError, FileNotFoundError) as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(code=1)


def _print_status(payload) -> None:
    if payload is None:
        console.print("[yellow]Not logged in.[/]")
        return
    console.print(f"Logged in as [bold]{payload['email']}[/]")
    table = Table(title="Subscriptions")
    table.add_column("Subscription", style="cyan")
    table.add_column("Sandbox", justify="center")
    for subscription in payload["subscriptions"]:
        table.add_row(subscription["label"], "✓" if subscription["isMicrosoftLearnSubscription"] else "")
    console.print(table)


@app.command("login")
def login(config: Optional[str] = ConfigOption, debug: bool = DebugOption):
    """Sign in to Azure and list your subscriptions."""
    async def _login():
        services = _services(config, debug)
        response = await services.handle(ExtensionCommand.LOGIN, {})
        _print_status(response["payload"])
    _run(_login())


@app.command("logout")
def logout(config: Optional[str] = ConfigOption, debug: bool = DebugOption):
    """Sign out of Azure."""
    async def _logout():
        services = _services(config, debug)
        response = await services.handle(ExtensionCommand.LOGOUT, {})
        if response["payload"]["success"]:
            console.print("[green]Logged out.[/]")
    _run(_logout())


@app.command("status")
def status(config: Optional[str] = ConfigOption, debug: bool = DebugOption):
    """Show the signed-in user and their subscriptions."""
    async def _status():
        services = _services(config, debug)
        response = await services.handle(ExtensionCommand.GET_USER_STATUS, {})
        _print_status(response["payload"])
    _run(_status())


@app.command("subscription-data")
def subscription_data(
    kind: str = typer.Argument(..., help="Resource kind: appservice, cosmos or functions"),
    subscription: str = typer.Option(..., "--subscription", "-s", help="Subscription name"),
    project_name: str = typer.Option("", "--project-name", "-p", help="Project name, used to suggest a Cosmos DB name"),
    config: Optional[str] = ConfigOption,
    debug: bool = DebugOption,
):
    """List resource groups and locations available for a resource kind."""
    resource_kind = _kind(kind)

    async def _data():
        services = _services(config, debug)
        await _load_subscriptions(services)
        response = await services.handle(SUBSCRIPTION_DATA_COMMANDS[resource_kind], {
            "subscription": subscription,
            "projectName": project_name,
        })
        payload = response["payload"]

        table = Table(title=f"{subscription} resource groups")
        table.add_column("Resource group", style="cyan")
        for group in payload["resourceGroups"]:
            table.add_row(group["label"])
        console.print(table)

        table = Table(title=f"{resource_kind.value} locations")
        table.add_column("Location", style="cyan")
        for location in payload["locations"]:
            table.add_row(location["label"])
        console.print(table)

        if "validName" in payload:
            console.print(f"Suggested account name: [bold]{payload['validName']}[/]")
    _run(_data())


@app.command("valid-name")
def valid_name(
    kind: str = typer.Argument(..., help="Resource kind: appservice, cosmos or functions"),
    project_name: str = typer.Option(..., "--project-name", "-p", help="Project name"),
    debug: bool = DebugOption,
):
    """Suggest a resource name derived from the project name."""
    resource_kind = _kind(kind)

    async def _name():
        services = _services(None, debug)
        response = await services.handle(VALID_NAME_COMMANDS[resource_kind], {"projectName": project_name})
        console.print(response["payload"]["validName"])
    _run(_name())


@app.command("validate-name")
def validate_name(
    kind: str = typer.Argument(..., help="Resource kind: appservice, cosmos or functions"),
    name: str = typer.Argument(..., help="Name to check"),
    subscription: str = typer.Option(..., "--subscription", "-s", help="Subscription name"),
    config: Optional[str] = ConfigOption,
    debug: bool = DebugOption,
):
    """Check whether a resource name is available."""
    resource_kind = _kind(kind)

    async def _validate():
        services = _services(config, debug)
        await _load_subscriptions(services)
        response = await services.handle(NAME_COMMANDS[resource_kind], {
            "subscription": subscription,
            "appName": name,
        })
        payload = response["payload"]
        if payload["isAvailable"]:
            console.print(f"[green]✓ {name} is available[/]")
        else:
            console.print(f"[red]❌ {name}: {payload['reason']}[/]")
            raise typer.Exit(code=2)
    _run(_validate())


@app.command("plan")
def plan(
    selections: str = typer.Argument(..., help="Path to the deployment selections YAML file"),
    config: Optional[str] = ConfigOption,
    debug: bool = DebugOption,
):
    """Show the resource groups a deployment would use."""
    async def _plan():
        services = _services(config, debug)
        await _load_subscriptions(services)
        payload = SelectionsParser.load(selections)
        planned = await services.generate_distinct_resource_group_selections(payload)

        table = Table(title="Resource Group Plan")
        table.add_column("Subscription", style="cyan")
        table.add_column("Resource group")
        table.add_column("Location")
        table.add_column("Action")
        for selection in planned:
            sandbox = services.is_microsoft_learn_subscription(selection.subscription_item)
            table.add_row(
                selection.subscription_item.label,
                selection.resource_group_name,
                selection.location,
                "reuse (sandbox)" if sandbox else "create",
            )
        console.print(table)
    _run(_plan())


@app.command("deploy")
def deploy(
    selections: str = typer.Argument(..., help="Path to the deployment selections YAML file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Answer yes to all prompts"),
    config: Optional[str] = ConfigOption,
    debug: bool = DebugOption,
):
    """Create every selected Azure resource."""
    async def _deploy():
        services = _services(config, debug, assume_yes=yes)
        await _load_subscriptions(services)
        payload = SelectionsParser.load(selections)

        console.print("[bold blue]Deploying resources...[/]")
        result = await services.deploy(payload)

        table = Table(title="Deployment Summary")
        table.add_column("Resource", style="cyan")
        table.add_column("Stage")
        table.add_column("Details")
        for selection in result.resource_groups:
            table.add_row("Resource group", "", f"{selection.resource_group_name} ({selection.subscription_item.label})")
        if result.database is not None:
            table.add_row("Cosmos DB", result.stages.get(AzureResourceType.COSMOS.value, ""),
                          result.database.database_name)
        if result.web_app_id is not None:
            table.add_row("Web app", result.stages.get(AzureResourceType.APP_SERVICE.value, ""),
                          result.web_app_id)
        if result.function_app_id is not None:
            table.add_row("Function app", result.stages.get(AzureResourceType.FUNCTIONS.value, ""),
                          result.function_app_id)
        console.print(table)
        if result.env_replaced:
            console.print("[green].env updated with the new connection string[/]")
        console.print("\n[green]Deployment completed successfully![/]")
        console.print("You can view deployment details in the Azure Portal.")
    _run(_deploy())


if __name__ == "__main__":
    sys.exit(app())
