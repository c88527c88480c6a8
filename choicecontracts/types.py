"""Shared value types, messages and JSON encoding used by the contracts."""

from __future__ import annotations

import base64
import dataclasses
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from choicecontracts.errors import StdError, generic_err


@dataclass(frozen=True)
class NativeToken:
    """A native chain denomination."""

    denom: str

    wire_tag: ClassVar[str] = "native_token"

    def is_native_token(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.denom


@dataclass(frozen=True)
class Token:
    """A CW20 token identified by its contract address."""

    contract_addr: str

    wire_tag: ClassVar[str] = "token"

    def is_native_token(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.contract_addr


AssetInfo = Union[NativeToken, Token]


@dataclass(frozen=True)
class Asset:
    """An amount of some asset."""

    info: AssetInfo
    amount: int


@dataclass(frozen=True)
class Coin:
    """An amount of a native denomination."""

    denom: str
    amount: int


@dataclass(frozen=True)
class Env:
    """Execution environment of a contract call."""

    contract_address: str = "cosmos2contract"


@dataclass(frozen=True)
class MessageInfo:
    """Sender of a call and the native funds sent along with it."""

    sender: str
    funds: list[Coin] = field(default_factory=list)


@dataclass
class Deps:
    """Contract storage and an optional querier for chain state."""

    storage: dict[str, Any] = field(default_factory=dict)
    querier: Any = None


@dataclass(frozen=True)
class WasmExecute:
    """A call to execute another contract."""

    contract_addr: str
    msg: bytes
    funds: list[Coin] = field(default_factory=list)


@dataclass(frozen=True)
class Cw20Send:
    """CW20 ``send``: move tokens to a contract and notify it with ``msg``."""

    contract: str
    amount: int
    msg: bytes = b""

    wire_tag: ClassVar[str] = "send"


@dataclass(frozen=True)
class Cw20ReceiveMsg:
    """Notification a CW20 contract sends to the recipient of a ``send``."""

    sender: str
    amount: int
    msg: bytes = b""

    wire_tag: ClassVar[str] = "receive"


@dataclass
class Response:
    """Outcome of a call: messages to dispatch and attributes to log."""

    messages: list[Any] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)

    def add_message(self, msg: Any) -> Response:
        self.messages.append(msg)
        return self

    def add_messages(self, msgs: Any) -> Response:
        self.messages.extend(msgs)
        return self

    def add_attribute(self, key: str, value: object) -> Response:
        self.attributes.append((key, str(value)))
        return self


def validate_addr(addr: str) -> str:
    """Check that ``addr`` is a usable, normalized address and return it."""
    if len(addr) < 3:
        raise generic_err(
            "Invalid input: human address too short for this mock implementation (must be >= 3)."
        )
    if addr != addr.lower():
        raise generic_err("Invalid input: address not normalized")
    return addr


def _to_jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, float, str)):
        return value
    if isinstance(value, int):
        # 128-bit amounts travel as decimal strings
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        plain_ints = getattr(value, "wire_plain_ints", frozenset())
        body = {}
        for item in dataclasses.fields(value):
            attr = getattr(value, item.name)
            if item.name in plain_ints and isinstance(attr, int):
                body[item.name] = attr
            else:
                body[item.name] = _to_jsonable(attr)
        tag = getattr(type(value), "wire_tag", None)
        return {tag: body} if tag else body
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def to_json_binary(value: Any) -> bytes:
    """Encode a value as compact JSON bytes."""
    return json.dumps(_to_jsonable(value), separators=(",", ":")).encode("utf-8")


def from_json(data: bytes | str) -> Any:
    """Decode JSON bytes into plain Python data."""
    try:
        return json.loads(data)
    except (ValueError, TypeError) as exc:
        raise StdError(str(exc), kind="Parse error") from None