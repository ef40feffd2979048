"""ARM templates for resources created through template deployments."""
import json
from pathlib import Path
from typing import Any, Dict, Tuple

from jinja2 import BaseLoader, Environment

TEMPLATES = {
    "appservice": """{
  "$schema": "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#",
  "contentVersion": "1.0.0.0",
  "parameters": {
    "siteName": {"type": "string"},
    "location": {"type": "string"},
    "appServicePlanName": {"type": "string"},
    "sku": {"type": "string"},
    "tier": {"type": "string"},
    "linuxFxVersion": {"type": "string"}
  },
  "resources": [
    {
      "type": "Microsoft.Web/serverfarms",
      "apiVersion": "2022-03-01",
      "name": "[parameters('appServicePlanName')]",
      "location": "[parameters('location')]",
      "kind": "linux",
      "sku": {"name": "[parameters('sku')]", "tier": "[parameters('tier')]"},
      "properties": {"reserved": true}
    },
    {
      "type": "Microsoft.Web/sites",
      "apiVersion": "2022-03-01",
      "name": "[parameters('siteName')]",
      "location": "[parameters('location')]",
      "kind": "app,linux",
      "dependsOn": [
        "[resourceId('Microsoft.Web/serverfarms', parameters('appServicePlanName'))]"
      ],
      "properties": {
        "serverFarmId": "[resourceId('Microsoft.Web/serverfarms', parameters('appServicePlanName'))]",
        "httpsOnly": true,
        "siteConfig": {
          "linuxFxVersion": "[parameters('linuxFxVersion')]"{% if always_on %},
          "alwaysOn": true{% endif %}
        }
      }
    }
  ]
}
""",

    "functionapp": """{
  "$schema": "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#",
  "contentVersion": "1.0.0.0",
  "parameters": {
    "functionAppName": {"type": "string"},
    "storageAccountName": {"type": "string"},
    "location": {"type": "string"},
    "runtime": {"type": "string"}
  },
  "resources": [
    {
      "type": "Microsoft.Storage/storageAccounts",
      "apiVersion": "2022-09-01",
      "name": "[parameters('storageAccountName')]",
      "location": "[parameters('location')]",
      "kind": "StorageV2",
      "sku": {"name": "Standard_LRS"}
    },
    {
      "type": "Microsoft.Web/serverfarms",
      "apiVersion": "2022-03-01",
      "name": "[parameters('functionAppName')]",
      "location": "[parameters('location')]",
      "sku": {"name": "Y1", "tier": "Dynamic"},
      "properties": {}
    },
    {
      "type": "Microsoft.Web/sites",
      "apiVersion": "2022-03-01",
      "name": "[parameters('functionAppName')]",
      "location": "[parameters('location')]",
      "kind": "functionapp",
      "dependsOn": [
        "[resourceId('Microsoft.Web/serverfarms', parameters('functionAppName'))]",
        "[resourceId('Microsoft.Storage/storageAccounts', parameters('storageAccountName'))]"
      ],
      "properties": {
        "serverFarmId": "[resourceId('Microsoft.Web/serverfarms', parameters('functionAppName'))]",
        "siteConfig": {
          "appSettings": [
            {
              "name": "AzureWebJobsStorage",
              "value": "[concat('DefaultEndpointsProtocol=https;AccountName=', parameters('storageAccountName'), ';AccountKey=', listKeys(resourceId('Microsoft.Storage/storageAccounts', parameters('storageAccountName')), '2022-09-01').keys[0].value)]"
            },
            {"name": "FUNCTIONS_EXTENSION_VERSION", "value": "~4"},
            {"name": "FUNCTIONS_WORKER_RUNTIME", "value": "[parameters('runtime')]"}{% for name in function_names %},
            {"name": "AzureWebJobs.{{ name }}.Disabled", "value": "false"}{% endfor %}
          ]
        }
      }
    }
  ]
}
""",

    "cosmos": """{
  "$schema": "https://schema.management.azure.com/schemas/2019-04-01/deploymentTemplate.json#",
  "contentVersion": "1.0.0.0",
  "parameters": {
    "name": {"type": "string"},
    "location": {"type": "string"}
  },
  "resources": [
    {
      "type": "Microsoft.DocumentDB/databaseAccounts",
      "apiVersion": "2023-04-15",
      "name": "[parameters('name')]",
      "location": "[parameters('location')]",
      "kind": {{ kind | tojson }},
      "properties": {
        "databaseAccountOfferType": "Standard",
        "locations": [
          {"locationName": "[parameters('location')]", "failoverPriority": 0}
        ]{% if capabilities %},
        "capabilities": [{% for capability in capabilities %}{"name": {{ capability | tojson }}}{% if not loop.last %}, {% endif %}{% endfor %}]{% endif %}
      }
    }
  ]
}
""",
}

_env = Environment(loader=BaseLoader())
_env.filters["tojson"] = json.dumps


def render_template(name: str, **context: Any) -> Dict[str, Any]:
    """Render an ARM template and parse it.

    Args:
        name: Key in TEMPLATES.
        **context: Jinja2 context for the template's conditional parts.

    Returns:
        Dict[str, Any]: The ARM template as a JSON object.
    """
    rendered = _env.from_string(TEMPLATES[name]).render(**context)
    return json.loads(rendered)


def to_parameters(values: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Wrap plain values in the ARM parameter format."""
    return {key: {"value": value} for key, value in values.items()}


def write_template_files(output_dir: Path, name: str, template: Dict, parameters: Dict) -> Tuple[Path, Path]:
    """Write a template and its parameters file next to the generated project.

    Returns:
        Tuple[Path, Path]: Paths of the template and parameters files.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    template_path = output_dir / f"{name}-template.json"
    params_path = output_dir / f"{name}-parameters.json"

    template_path.write_text(json.dumps(template, indent=2))
    params_path.write_text(json.dumps({
        "$schema": "https://schema.management.azure.com/schemas/2019-04-01/deploymentParameters.json#",
        "contentVersion": "1.0.0.0",
        "parameters": parameters,
    }, indent=2))
    return template_path, params_path
