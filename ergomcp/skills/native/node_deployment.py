"""Native executor for the local Ergo node deployment skill.

Deployment walks a linear sequence of stages with no retries and no resume:

    START -> DIR_READY -> ARTIFACT_READY -> CONFIGURED -> LAUNCHED

A failure ends the run with status "error" naming the stage that failed.
Nothing is rolled back: the node directory, a partial download or the
generated config may remain on disk after a failure.

The launched node is handed over to the operating system. It runs in its own
session with stdio detached, so it outlives the tool call and the server
process; the executor's contract ends once the spawn is confirmed and it never
polls the node for readiness.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from ergomcp.utils.error_handler import (
    ArtifactNotFoundError,
    DownloadError,
    ErgoMCPError,
    SpawnError,
    format_validation_error,
)

from .base import NativeSkill

LOGGER = logging.getLogger(__name__)

SKILL_NAME = "local-ergo-node-deployment"
TOOL_NAME = "deploy_ergo_node"

CONFIG_FILE_NAME = "ergo.conf"
NETWORK_PORTS = {"mainnet": 9053, "testnet": 9052}

CONFIG_TEMPLATE = """ergo {{
  node {{
    mining = false
  }}
}}
scorex {{
  restApi {{
    apiKeyHash = "{api_key_hash}"
  }}
}}
"""


class DeployStage(str, Enum):
    START = "START"
    DIR_READY = "DIR_READY"
    ARTIFACT_READY = "ARTIFACT_READY"
    CONFIGURED = "CONFIGURED"
    LAUNCHED = "LAUNCHED"


class DeployNodeArgs(BaseModel):
    """Arguments of deploy_ergo_node."""

    version: str = Field(
        min_length=1,
        description="The version of the Ergo node to download (e.g., '5.0.16' or 'latest').",
    )
    api_key_password: str = Field(
        min_length=1,
        description="A plaintext password for securing the node's REST API.",
    )
    network: str = Field(
        default="mainnet",
        description="The network to connect to ('mainnet' or 'testnet').",
    )
    directory: str = Field(
        default="ergo_node",
        min_length=1,
        description="The name of the folder to create for the Ergo node files.",
    )
    memory_allocation_gb: int = Field(
        default=4,
        ge=1,
        description="The amount of RAM (in GB) to allocate to the JVM.",
    )

    @field_validator("network", mode="before")
    @classmethod
    def _normalize_network(cls, value: Any) -> str:
        # Anything but an explicit testnet request runs on mainnet
        if isinstance(value, str) and value.strip().lower() == "testnet":
            return "testnet"
        return "mainnet"


@dataclass(frozen=True, slots=True)
class LaunchedProcess:
    """A node process whose ownership has passed to the operating system."""

    pid: int
    command: Tuple[str, ...]

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


def hash_api_key(password: str) -> str:
    """Blake2b-256 hex digest of the REST API key.

    The node compares restApi.apiKeyHash against Blake2b256 of the key sent in
    the api_key header; a sha256 digest would never match.
    """

    return hashlib.blake2b(password.encode("utf-8"), digest_size=32).hexdigest()


def render_config(api_key_hash: str) -> str:
    return CONFIG_TEMPLATE.format(api_key_hash=api_key_hash)


class ErgoNodeDeployer(NativeSkill):
    """Downloads, configures and launches a local Ergo node."""

    executor_id = "ergo_node_deployer"
    skill_name = SKILL_NAME
    tool_name = TOOL_NAME

    def __init__(
        self,
        base_dir: Optional[str] = None,
        release_repo: str = "ergoplatform/ergo",
        java_bin: str = "java",
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir else None
        self.release_repo = release_repo.strip("/")
        self.java_bin = java_bin
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    @property
    def input_schema(self) -> Dict[str, Any]:
        return DeployNodeArgs.model_json_schema()

    async def run(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        try:
            args = DeployNodeArgs.model_validate(arguments or {})
        except ValidationError as e:
            return self._error(DeployStage.START, f"invalid arguments ({format_validation_error(e)})")

        stage = DeployStage.DIR_READY
        try:
            node_dir = await asyncio.to_thread(self._prepare_directory, args.directory)

            stage = DeployStage.ARTIFACT_READY
            jar_name = await self._ensure_artifact(args.version, node_dir)

            stage = DeployStage.CONFIGURED
            await asyncio.to_thread(self._write_config, node_dir, args.api_key_password)

            stage = DeployStage.LAUNCHED
            LOGGER.info(f"Starting Ergo node in {node_dir}...")
            launched = await asyncio.to_thread(self._spawn, self._build_command(jar_name, args), node_dir)
        except ErgoMCPError as e:
            return self._error(stage, str(e))
        except Exception as e:
            LOGGER.exception(f"Unexpected failure during {stage.value}", exc_info=e)
            return self._error(stage, str(e) or type(e).__name__)

        port = NETWORK_PORTS[args.network]
        LOGGER.info(f"Ergo node launched (pid={launched.pid}, network={args.network})")
        return {
            "status": "success",
            "message": f"Ergo node launched successfully on {args.network}.",
            "network": args.network,
            "node_directory": str(node_dir),
            "pid": launched.pid,
            "web_panel_url": f"http://127.0.0.1:{port}/panel",
            "api_url": f"http://127.0.0.1:{port}",
            "command_executed": launched.command_line,
        }

    def _error(self, stage: DeployStage, reason: str) -> Dict[str, Any]:
        LOGGER.error(f"Node deployment failed at {stage.value}: {reason}")
        return {
            "status": "error",
            "stage": stage.value,
            "message": f"Failed to deploy Ergo node: {reason}",
        }

    def _prepare_directory(self, directory: str) -> Path:
        base = self.base_dir or Path(os.getcwd())
        node_dir = (base / directory).resolve()
        node_dir.mkdir(parents=True, exist_ok=True)
        return node_dir

    async def _resolve_artifact(self, version: str) -> Tuple[str, str]:
        """Return (download_url, file_name) of the node jar for a release."""

        releases = f"{self.api_url}/repos/{self.release_repo}/releases"
        if version.strip().lower() == "latest":
            url, label = f"{releases}/latest", "latest release"
        else:
            tag = version if version.startswith("v") else f"v{version}"
            url, label = f"{releases}/tags/{tag}", f"release {tag}"

        try:
            response = await self._client.get(url, headers={"Accept": "application/vnd.github.v3+json"})
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to look up {label}: {e}") from e

        if response.status_code == 404:
            raise ArtifactNotFoundError(f"Failed to find {label}")
        try:
            response.raise_for_status()
            release = response.json()
        except (httpx.HTTPStatusError, ValueError) as e:
            raise DownloadError(f"Failed to look up {label}: {e}") from e

        for asset in release.get("assets") or []:
            name = asset.get("name") or ""
            if name.endswith(".jar") and asset.get("browser_download_url"):
                return asset["browser_download_url"], name
        raise ArtifactNotFoundError(f"Could not find JAR in {label}")

    async def _ensure_artifact(self, version: str, node_dir: Path) -> str:
        download_url, file_name = await self._resolve_artifact(version)
        jar_path = node_dir / file_name
        if jar_path.exists():
            LOGGER.info(f"{file_name} already present, skipping download")
            return file_name

        LOGGER.info(f"Downloading {file_name} from {download_url}...")
        part_path = jar_path.with_name(jar_path.name + ".part")
        try:
            async with self._client.stream("GET", download_url) as response:
                response.raise_for_status()
                with part_path.open("wb") as handle:
                    async for chunk in response.aiter_bytes():
                        handle.write(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download {file_name}: {e}") from e
        part_path.replace(jar_path)
        return file_name

    def _write_config(self, node_dir: Path, api_key_password: str) -> Path:
        config_path = node_dir / CONFIG_FILE_NAME
        config_path.write_text(render_config(hash_api_key(api_key_password)), encoding="utf-8")
        return config_path

    def _build_command(self, jar_name: str, args: DeployNodeArgs) -> List[str]:
        return [
            self.java_bin,
            f"-Xmx{args.memory_allocation_gb}G",
            "-jar",
            jar_name,
            "--testnet" if args.network == "testnet" else "--mainnet",
            "-c",
            CONFIG_FILE_NAME,
        ]

    def _spawn(self, command: List[str], cwd: Path) -> LaunchedProcess:
        try:
            process = subprocess.Popen(
                command,
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start '{command[0]}': {e}") from e
        return LaunchedProcess(pid=process.pid, command=tuple(command))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
