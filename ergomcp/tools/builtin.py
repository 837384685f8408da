"""Statically compiled blockchain query tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .explorer import ExplorerClient


class AddressBalanceArgs(BaseModel):
    address: str = Field(description="The Ergo address to check balance for (e.g., 9...).")


class TransactionArgs(BaseModel):
    txId: str = Field(description="The transaction ID (64 hex characters).")


class BlockHeaderArgs(BaseModel):
    identifier: str = Field(description="The block ID (hash) or block height (integer).")

    @field_validator("identifier", mode="before")
    @classmethod
    def _height_as_text(cls, value: Any) -> Any:
        # Hosts often send heights as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TokenSearchArgs(BaseModel):
    query: str = Field(description="Token name or ID fragment to search for.")


class NoArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


@dataclass(frozen=True, slots=True)
class BuiltinTool:
    """A built-in tool: public contract plus the explorer call behind it."""

    name: str
    description: str
    args_model: Type[BaseModel]
    handler: Callable[[ExplorerClient, Any], Awaitable[Any]]

    @property
    def input_schema(self) -> Dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return schema


BUILTIN_TOOLS: List[BuiltinTool] = [
    BuiltinTool(
        name="get_address_balance",
        description="Get the confirmed balance and tokens for an Ergo address.",
        args_model=AddressBalanceArgs,
        handler=lambda explorer, args: explorer.get_address_balance(args.address),
    ),
    BuiltinTool(
        name="get_transaction_details",
        description="Get details of an Ergo transaction by its ID.",
        args_model=TransactionArgs,
        handler=lambda explorer, args: explorer.get_transaction_details(args.txId),
    ),
    BuiltinTool(
        name="get_block_header",
        description="Get the header details of an Ergo block by ID or Height.",
        args_model=BlockHeaderArgs,
        handler=lambda explorer, args: explorer.get_block_header(args.identifier),
    ),
    BuiltinTool(
        name="search_tokens",
        description="Search Ergo tokens by name or ID.",
        args_model=TokenSearchArgs,
        handler=lambda explorer, args: explorer.search_tokens(args.query),
    ),
    BuiltinTool(
        name="get_ergo_price",
        description="Get current Ergo price in USD/EUR.",
        args_model=NoArgs,
        handler=lambda explorer, args: explorer.get_ergo_price(),
    ),
]
