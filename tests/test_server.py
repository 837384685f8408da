"""End-to-end tests over an in-memory MCP client session."""

import json
from importlib.metadata import version

import httpx
import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from conftest import NODE_SKILL_MD
from ergomcp.server import SERVER_NAME, build_server
from ergomcp.skills.native.node_deployment import ErgoNodeDeployer
from ergomcp.skills.registry import SkillRegistry
from ergomcp.tools.dispatcher import ToolDispatcher
from ergomcp.tools.explorer import ExplorerClient


@pytest.fixture
async def server(two_skill_source, tmp_path):
    deployer = ErgoNodeDeployer(
        base_dir=str(tmp_path),
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404))),
    )
    registry = SkillRegistry(two_skill_source, executors=[deployer])
    await registry.load_skills()
    explorer = ExplorerClient(
        client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"ergo": {"usd": 2.0}}))
        ),
    )
    return build_server(ToolDispatcher(registry, explorer))


def test_server_identity(server):
    assert server.name == SERVER_NAME


@pytest.mark.asyncio
async def test_list_tools_over_protocol(server):
    async with create_connected_server_and_client_session(server) as session:
        result = await session.list_tools()

    names = [tool.name for tool in result.tools]
    assert "deploy_ergo_node" in names
    assert "price_alert" in names
    assert names[0] == "get_address_balance"

    deploy = next(tool for tool in result.tools if tool.name == "deploy_ergo_node")
    assert deploy.description == "Deploy a local Ergo node"
    assert "api_key_password" in deploy.inputSchema["required"]


@pytest.mark.asyncio
async def test_call_builtin_over_protocol(server):
    async with create_connected_server_and_client_session(server) as session:
        result = await session.call_tool("get_ergo_price", {})

    assert not result.isError
    assert json.loads(result.content[0].text) == {"ergo": {"usd": 2.0}}


@pytest.mark.asyncio
async def test_deploy_without_password_is_reported_in_result(server):
    async with create_connected_server_and_client_session(server) as session:
        result = await session.call_tool("deploy_ergo_node", {"version": "latest"})

    # Executor failures are successful calls carrying a status=error payload
    assert not result.isError
    body = json.loads(result.content[0].text)
    assert body["status"] == "error"
    assert body["stage"] == "START"


@pytest.mark.asyncio
async def test_unknown_tool_over_protocol(server):
    async with create_connected_server_and_client_session(server) as session:
        result = await session.call_tool("no_such_tool", {})

    assert result.isError
    assert result.content[0].text == "Error: Unknown tool: no_such_tool"


@pytest.mark.asyncio
async def test_alias_dispatches_to_native_executor(server):
    async with create_connected_server_and_client_session(server) as session:
        result = await session.call_tool("local_ergo_node_deployment", {})

    # The alias resolves to the native executor, not the document
    body = json.loads(result.content[0].text)
    assert body["status"] == "error"
    assert NODE_SKILL_MD not in result.content[0].text


def test_installed_mcp_is_supported_major_version():
    # Server handler decorators and CallToolResult.isError are the 1.x API
    assert int(version("mcp").split(".")[0]) == 1
