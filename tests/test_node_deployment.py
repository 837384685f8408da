"""Tests for the local Ergo node deployment executor."""

import hashlib
from unittest.mock import MagicMock, patch

import httpx
import pytest

from ergomcp.skills.native.node_deployment import (
    DeployNodeArgs,
    ErgoNodeDeployer,
    hash_api_key,
    render_config,
)

JAR_NAME = "ergo-5.0.16.jar"
JAR_BYTES = b"PK\x03\x04fake-jar"


def release_payload(assets=None):
    if assets is None:
        assets = [
            {"name": "ergo-5.0.16.zip", "browser_download_url": "https://dl.test/ergo.zip"},
            {"name": JAR_NAME, "browser_download_url": f"https://dl.test/{JAR_NAME}"},
        ]
    return {"tag_name": "v5.0.16", "assets": assets}


class ReleaseServer:
    """MockTransport handler serving release metadata and the jar download."""

    def __init__(self, release=None, release_status=200):
        self.release = release_payload() if release is None else release
        self.release_status = release_status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if request.url.host == "dl.test":
            return httpx.Response(200, content=JAR_BYTES)
        if self.release_status != 200:
            return httpx.Response(self.release_status, json={"message": "Not Found"})
        return httpx.Response(200, json=self.release)


@pytest.fixture
def popen():
    with patch("subprocess.Popen") as mock_popen:
        mock_popen.return_value = MagicMock(pid=4242)
        yield mock_popen


def make_deployer(tmp_path, server):
    client = httpx.AsyncClient(transport=httpx.MockTransport(server))
    return ErgoNodeDeployer(
        base_dir=str(tmp_path),
        api_url="https://api.github.test",
        client=client,
    )


@pytest.mark.asyncio
async def test_deploy_latest_success(tmp_path, popen):
    server = ReleaseServer()
    deployer = make_deployer(tmp_path, server)

    result = await deployer.run({"version": "latest", "api_key_password": "hunter2"})

    node_dir = tmp_path / "ergo_node"
    assert result["status"] == "success"
    assert result["network"] == "mainnet"
    assert result["pid"] == 4242
    assert result["node_directory"] == str(node_dir.resolve())
    assert result["web_panel_url"] == "http://127.0.0.1:9053/panel"
    assert result["api_url"] == "http://127.0.0.1:9053"
    assert result["command_executed"] == f"java -Xmx4G -jar {JAR_NAME} --mainnet -c ergo.conf"

    assert server.requests[0] == "https://api.github.test/repos/ergoplatform/ergo/releases/latest"
    assert (node_dir / JAR_NAME).read_bytes() == JAR_BYTES
    assert not (node_dir / f"{JAR_NAME}.part").exists()

    args, kwargs = popen.call_args
    assert args[0] == ["java", "-Xmx4G", "-jar", JAR_NAME, "--mainnet", "-c", "ergo.conf"]
    assert kwargs["cwd"] == str(node_dir.resolve())
    assert kwargs["start_new_session"] is True


@pytest.mark.asyncio
async def test_deploy_pinned_version_testnet(tmp_path, popen):
    server = ReleaseServer()
    deployer = make_deployer(tmp_path, server)

    result = await deployer.run({
        "version": "5.0.16",
        "api_key_password": "pw",
        "network": "testnet",
        "directory": "testnode",
        "memory_allocation_gb": 8,
    })

    assert result["status"] == "success"
    assert result["network"] == "testnet"
    assert result["api_url"] == "http://127.0.0.1:9052"
    assert server.requests[0] == "https://api.github.test/repos/ergoplatform/ergo/releases/tags/v5.0.16"
    assert popen.call_args.args[0][1] == "-Xmx8G"
    assert "--testnet" in popen.call_args.args[0]
    assert (tmp_path / "testnode" / "ergo.conf").exists()


@pytest.mark.asyncio
async def test_config_contains_hash_not_password(tmp_path, popen):
    deployer = make_deployer(tmp_path, ReleaseServer())

    await deployer.run({"version": "latest", "api_key_password": "hunter2"})

    config = (tmp_path / "ergo_node" / "ergo.conf").read_text(encoding="utf-8")
    expected_hash = hashlib.blake2b(b"hunter2", digest_size=32).hexdigest()
    assert "mining = false" in config
    assert f'apiKeyHash = "{expected_hash}"' in config
    assert "hunter2" not in config


@pytest.mark.asyncio
async def test_missing_password_fails_before_any_side_effect(tmp_path, popen):
    server = ReleaseServer()
    deployer = make_deployer(tmp_path, server)

    result = await deployer.run({"version": "latest"})

    assert result["status"] == "error"
    assert result["stage"] == "START"
    assert result["message"].startswith("Failed to deploy Ergo node: invalid arguments")
    assert "api_key_password" in result["message"]
    assert server.requests == []
    assert not (tmp_path / "ergo_node").exists()
    popen.assert_not_called()


@pytest.mark.asyncio
async def test_release_not_found(tmp_path, popen):
    deployer = make_deployer(tmp_path, ReleaseServer(release_status=404))

    result = await deployer.run({"version": "9.9.9", "api_key_password": "pw"})

    assert result == {
        "status": "error",
        "stage": "ARTIFACT_READY",
        "message": "Failed to deploy Ergo node: Failed to find release v9.9.9",
    }
    # Directory creation is not rolled back
    assert (tmp_path / "ergo_node").is_dir()
    popen.assert_not_called()


@pytest.mark.asyncio
async def test_release_without_jar(tmp_path, popen):
    server = ReleaseServer(release=release_payload(assets=[{"name": "notes.txt", "browser_download_url": "x"}]))
    deployer = make_deployer(tmp_path, server)

    result = await deployer.run({"version": "latest", "api_key_password": "pw"})

    assert result["status"] == "error"
    assert result["message"] == "Failed to deploy Ergo node: Could not find JAR in latest release"
    popen.assert_not_called()


@pytest.mark.asyncio
async def test_existing_jar_is_not_downloaded_again(tmp_path, popen):
    node_dir = tmp_path / "ergo_node"
    node_dir.mkdir()
    (node_dir / JAR_NAME).write_bytes(b"already here")
    server = ReleaseServer()
    deployer = make_deployer(tmp_path, server)

    result = await deployer.run({"version": "latest", "api_key_password": "pw"})

    assert result["status"] == "success"
    assert not any("dl.test" in url for url in server.requests)
    assert (node_dir / JAR_NAME).read_bytes() == b"already here"


@pytest.mark.asyncio
async def test_spawn_failure_reports_launch_stage(tmp_path, popen):
    popen.side_effect = FileNotFoundError("java not found")
    deployer = make_deployer(tmp_path, ReleaseServer())

    result = await deployer.run({"version": "latest", "api_key_password": "pw"})

    assert result["status"] == "error"
    assert result["stage"] == "LAUNCHED"
    assert "Failed to start 'java'" in result["message"]
    # Artifact and config remain on disk
    assert (tmp_path / "ergo_node" / "ergo.conf").exists()


@pytest.mark.parametrize("network,expected", [
    ("testnet", "testnet"),
    ("TestNet", "testnet"),
    ("mainnet", "mainnet"),
    ("devnet", "mainnet"),
    (None, "mainnet"),
])
def test_network_falls_back_to_mainnet(network, expected):
    args = DeployNodeArgs(version="latest", api_key_password="pw", network=network)
    assert args.network == expected


def test_memory_must_be_positive():
    with pytest.raises(ValueError):
        DeployNodeArgs(version="latest", api_key_password="pw", memory_allocation_gb=0)


def test_hash_api_key_is_blake2b256():
    digest = hash_api_key("hello")
    assert len(digest) == 64
    assert digest == hashlib.blake2b(b"hello", digest_size=32).hexdigest()
    assert digest in render_config(digest)


@pytest.mark.asyncio
async def test_input_schema_requires_version_and_password(tmp_path):
    deployer = make_deployer(tmp_path, ReleaseServer())
    schema = deployer.input_schema
    await deployer.aclose()

    assert set(schema["required"]) == {"version", "api_key_password"}
    assert "memory_allocation_gb" in schema["properties"]
