"""
Unit tests for NamespaceProvisioner and ScriptPublisher.
"""

import pytest

from app.core.exceptions import NamespaceProvisionError, PublishError
from app.external.cloudflare_client import CloudflareAPIError
from app.services.namespace_provisioner import NamespaceProvisioner
from app.services.script_publisher import ScriptPublisher
from tests.conftest import FakeCloudflareClient


class TestNamespaceProvisioner:

    def test_existing_namespace_not_recreated(self):
        cloudflare = FakeCloudflareClient(namespaces=["meta-mcp"])

        NamespaceProvisioner(cloudflare).ensure("meta-mcp")

        assert cloudflare.call_names() == ["get_namespace"]

    def test_missing_namespace_created(self):
        cloudflare = FakeCloudflareClient()

        result = NamespaceProvisioner(cloudflare).ensure("meta-mcp")

        assert result == {"name": "meta-mcp"}
        assert cloudflare.namespaces == {"meta-mcp"}

    def test_ensure_is_idempotent(self):
        cloudflare = FakeCloudflareClient()
        provisioner = NamespaceProvisioner(cloudflare)

        provisioner.ensure("meta-mcp")
        provisioner.ensure("meta-mcp")

        assert len(cloudflare.calls_to("create_namespace")) == 1

    def test_lookup_error_other_than_not_found_still_creates(self):
        cloudflare = FakeCloudflareClient()
        cloudflare.failures["get_namespace"] = CloudflareAPIError(500, [{"message": "Internal error"}])

        result = NamespaceProvisioner(cloudflare).ensure("meta-mcp")

        assert result == {"name": "meta-mcp"}
        assert cloudflare.call_names() == ["get_namespace", "create_namespace"]

    def test_lookup_and_create_failure_raises(self):
        cloudflare = FakeCloudflareClient()
        cloudflare.failures["create_namespace"] = CloudflareAPIError(403, [{"message": "Forbidden"}])

        with pytest.raises(NamespaceProvisionError) as exc_info:
            NamespaceProvisioner(cloudflare).ensure("meta-mcp")

        assert exc_info.value.namespace == "meta-mcp"
        assert "Forbidden" in str(exc_info.value)


class TestScriptPublisher:

    def test_metadata_without_bindings(self):
        assert ScriptPublisher(FakeCloudflareClient()).build_metadata("weather") == {"main_module": "weather.mjs"}

    def test_empty_bindings_are_sent(self):
        metadata = ScriptPublisher(FakeCloudflareClient()).build_metadata("weather", [])

        assert metadata == {"main_module": "weather.mjs", "bindings": []}

    def test_publish_uploads_single_module(self):
        cloudflare = FakeCloudflareClient()

        ScriptPublisher(cloudflare).publish("meta-mcp", "weather", "code", [{"type": "d1", "name": "DB", "id": "x"}])

        assert cloudflare.scripts[("meta-mcp", "weather")] == {
            "metadata": {"main_module": "weather.mjs", "bindings": [{"type": "d1", "name": "DB", "id": "x"}]},
            "files": {"weather.mjs": "code"},
        }

    def test_publish_rejection_raises_publish_error(self):
        cloudflare = FakeCloudflareClient()
        cloudflare.failures["upload_script"] = CloudflareAPIError(400, [{"message": "Script too large"}])

        with pytest.raises(PublishError, match="Script too large") as exc_info:
            ScriptPublisher(cloudflare).publish("meta-mcp", "weather", "code")

        assert exc_info.value.worker_name == "weather"

    def test_remove_deletes_script_only(self):
        cloudflare = FakeCloudflareClient(namespaces=["meta-mcp"])
        publisher = ScriptPublisher(cloudflare)
        publisher.publish("meta-mcp", "weather", "code")

        publisher.remove("meta-mcp", "weather")

        assert cloudflare.scripts == {}
        assert cloudflare.namespaces == {"meta-mcp"}

    def test_remove_rejection_raises_publish_error(self):
        cloudflare = FakeCloudflareClient()
        cloudflare.failures["delete_script"] = CloudflareAPIError(404, [{"message": "Script not found"}])

        with pytest.raises(PublishError, match="Script not found"):
            ScriptPublisher(cloudflare).remove("meta-mcp", "weather")
