"""
Tests for the HTTP service binding error mapping.
"""

import httpx
import pytest

from tminus_mcp.api.errors import InvalidParamsError, NotFoundError, ServiceUnavailableError
from tminus_mcp.config import BindingSettings
from tminus_mcp.services.bindings import HttpServiceBinding, ServiceBindings, UnavailableServiceBinding


def binding_for(handler) -> HttpServiceBinding:
    return HttpServiceBinding(
        "usergraph", "http://usergraph.test/", token="secret", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
class TestHttpServiceBinding:
    async def test_posts_json_to_operation_path(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = request.content
            return httpx.Response(200, json={"constraint_id": "cst_1"})

        binding = binding_for(handler)
        result = await binding.call("constraints.add", {"kind": "trip"})
        await binding.aclose()

        assert result == {"constraint_id": "cst_1"}
        assert seen["path"] == "/constraints/add"
        assert seen["auth"] == "Bearer secret"
        assert b'"kind"' in seen["body"]

    @pytest.mark.parametrize(
        "status,body,error,message",
        [
            (404, {"error": "Relationship not found"}, NotFoundError, "Relationship not found"),
            (400, {"error": {"message": "bad window"}}, InvalidParamsError, "bad window"),
            (422, {"message": "unprocessable"}, InvalidParamsError, "unprocessable"),
            (500, {"error": "boom"}, ServiceUnavailableError, "Service binding unavailable: usergraph"),
            (503, None, ServiceUnavailableError, "Service binding unavailable: usergraph"),
        ],
    )
    async def test_status_mapping(self, status, body, error, message):
        binding = binding_for(lambda request: httpx.Response(status, json=body))

        with pytest.raises(error) as excinfo:
            await binding.call("relationships.add", {})
        assert str(excinfo.value) == message

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ServiceUnavailableError):
            await binding_for(handler).call("constraints.list", {})

    async def test_empty_success_body(self):
        binding = binding_for(lambda request: httpx.Response(204))

        assert await binding.call("relationships.mark_outcome", {}) == {}


@pytest.mark.asyncio
async def test_unconfigured_bindings_are_unavailable():
    bindings = ServiceBindings.from_settings(BindingSettings(usergraph_url="http://usergraph.test"))

    assert isinstance(bindings.usergraph, HttpServiceBinding)
    assert isinstance(bindings.commitments, UnavailableServiceBinding)
    with pytest.raises(ServiceUnavailableError, match="commitments"):
        await bindings.commitments.call("commitments.status", {})
    await bindings.aclose()
