"""Tests for ARM template rendering."""
import json

from acorn.providers.templates import render_template, to_parameters, write_template_files


def _site(template):
    return next(r for r in template["resources"] if r["type"] == "Microsoft.Web/sites")


def test_appservice_always_on_only_for_paid_plans():
    paid = render_template("appservice", always_on=True)
    free = render_template("appservice", always_on=False)

    assert _site(paid)["properties"]["siteConfig"]["alwaysOn"] is True
    assert "alwaysOn" not in _site(free)["properties"]["siteConfig"]


def test_functionapp_lists_function_settings():
    template = render_template("functionapp", function_names=["upload", "resize"])

    settings = [s["name"] for s in _site(template)["properties"]["siteConfig"]["appSettings"]]
    assert "AzureWebJobs.upload.Disabled" in settings
    assert "AzureWebJobs.resize.Disabled" in settings
    assert len(template["resources"]) == 3


def test_functionapp_without_functions():
    template = render_template("functionapp", function_names=[])

    settings = [s["name"] for s in _site(template)["properties"]["siteConfig"]["appSettings"]]
    assert settings == ["AzureWebJobsStorage", "FUNCTIONS_EXTENSION_VERSION", "FUNCTIONS_WORKER_RUNTIME"]


def test_cosmos_mongo_capabilities():
    template = render_template("cosmos", kind="MongoDB", capabilities=["EnableMongo"])

    account = template["resources"][0]
    assert account["kind"] == "MongoDB"
    assert account["properties"]["capabilities"] == [{"name": "EnableMongo"}]


def test_cosmos_sql_has_no_capabilities():
    template = render_template("cosmos", kind="GlobalDocumentDB", capabilities=[])

    assert "capabilities" not in template["resources"][0]["properties"]


def test_to_parameters():
    assert to_parameters({"name": "db", "count": 2}) == {"name": {"value": "db"}, "count": {"value": 2}}


def test_write_template_files(tmp_path):
    template = render_template("cosmos", kind="MongoDB", capabilities=["EnableMongo"])
    parameters = to_parameters({"name": "db", "location": "Central US"})

    template_path, params_path = write_template_files(tmp_path / "arm-templates", "cosmos", template, parameters)

    assert template_path == tmp_path / "arm-templates" / "cosmos-template.json"
    assert json.loads(template_path.read_text()) == template
    assert json.loads(params_path.read_text())["parameters"] == parameters
