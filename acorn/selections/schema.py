"""Pydantic models for the wizard's deployment selections."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Selections(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EngineSelections(_Selections):
    """Project being generated."""
    project_name: str = Field(alias="projectName")
    path: str
    backend_framework: str = Field(default="Node", alias="backendFramework")
    env_path: Optional[str] = Field(default=None, alias="envPath")


class AppServiceInput(_Selections):
    subscription: str
    site_name: str = Field(alias="siteName")
    resource_group: Optional[str] = Field(default=None, alias="resourceGroup")


class CosmosInput(_Selections):
    subscription: str
    account_name: str = Field(alias="accountName")
    api: str = "MongoDB"
    resource_group: Optional[str] = Field(default=None, alias="resourceGroup")
    location: Optional[str] = None


class FunctionsInput(_Selections):
    subscription: str
    app_name: str = Field(alias="appName")
    resource_group: Optional[str] = Field(default=None, alias="resourceGroup")
    location: Optional[str] = None
    runtime_stack: str = Field(default="node", alias="runtimeStack")
    function_names: List[str] = Field(default_factory=list, alias="functionNames")


class DeploymentPayload(_Selections):
    """Root selections schema."""
    engine: EngineSelections
    selected_app_service: bool = Field(default=False, alias="selectedAppService")
    app_service: Optional[AppServiceInput] = Field(default=None, alias="appService")
    selected_cosmos: bool = Field(default=False, alias="selectedCosmos")
    cosmos: Optional[CosmosInput] = None
    selected_functions: bool = Field(default=False, alias="selectedFunctions")
    functions: Optional[FunctionsInput] = None

    @model_validator(mode="after")
    def _selected_blocks_present(self):
        for flag, block, name in (
            (self.selected_app_service, self.app_service, "appService"),
            (self.selected_cosmos, self.cosmos, "cosmos"),
            (self.selected_functions, self.functions, "functions"),
        ):
            if flag and block is None:
                raise ValueError(f"'{name}' selections are required when it is selected")
        return self
