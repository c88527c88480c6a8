"""Contract that forwards native and CW20 tokens to the burn-auction subaccount."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from choicecontracts.errors import StdError, generic_err
from choicecontracts.types import (
    Asset,
    Coin,
    Cw20ReceiveMsg,
    Cw20Send,
    Deps,
    Env,
    MessageInfo,
    Response,
    Token,
    WasmExecute,
    to_json_binary,
)

_CONFIG_KEY = "config"
_BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_BECH32_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_BECH32_CONSTANTS = (1, 0x2BC830A3)


@dataclass(frozen=True)
class AuctionConfig:
    """Stored configuration of the contract."""

    admin: str
    adapter_contract: str
    burn_auction_subaccount: str


@dataclass(frozen=True)
class InstantiateMsg:
    admin: str
    adapter_contract: str
    burn_auction_subaccount: str


@dataclass(frozen=True)
class SendNative:
    """Forward a native token sent with the call."""

    asset: Asset

    wire_tag: ClassVar[str] = "send_native"


@dataclass(frozen=True)
class UpdateAdmin:
    """Replace the admin; only the current admin may do this."""

    admin: str

    wire_tag: ClassVar[str] = "update_admin"


@dataclass(frozen=True)
class GetConfig:
    """Query for the stored configuration."""

    wire_tag: ClassVar[str] = "get_config"


@dataclass(frozen=True)
class AdapterReceive:
    """Message understood by the CW20 adapter contract."""

    sender: str
    amount: int
    msg: bytes | None = None

    wire_tag: ClassVar[str] = "Receive"


@dataclass(frozen=True)
class Deposit:
    """Exchange-module deposit into a subaccount."""

    sender: str
    subaccount_id: str
    amount: Coin

    wire_tag: ClassVar[str] = "deposit"
    route: ClassVar[str] = "exchange"


@dataclass(frozen=True)
class ExternalTransfer:
    """Exchange-module transfer between subaccounts of different owners."""

    sender: str
    source_subaccount_id: str
    destination_subaccount_id: str
    amount: Coin

    wire_tag: ClassVar[str] = "external_transfer"
    route: ClassVar[str] = "exchange"


ExecuteMsg = Union[Cw20ReceiveMsg, SendNative, UpdateAdmin]


def load_config(deps: Deps) -> AuctionConfig:
    try:
        return deps.storage[_CONFIG_KEY]
    except KeyError:
        raise StdError("AuctionConfig not found", kind="Not found") from None


def save_config(deps: Deps, config: AuctionConfig) -> None:
    deps.storage[_CONFIG_KEY] = config


def subaccount_id(value: str) -> str:
    """Validate a subaccount id (``0x`` and 64 hex digits) and return it lower-cased."""
    if not value.startswith("0x"):
        raise generic_err(f"Invalid prefix: subaccount_id must start with 0x, got {value}")
    if len(value) != 66:
        raise generic_err(
            f"Invalid length: subaccount_id must be exactly 66 characters, got {value}"
        )
    digits = value[2:]
    if any(ch not in "0123456789abcdefABCDEF" for ch in digits):
        raise generic_err(f"Invalid characters: subaccount_id must be hex, got {value}")
    return value.lower()


def _bech32_polymod(values: list[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_BECH32_GENERATORS):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _bech32_decode(address: str) -> bytes:
    invalid = generic_err(f"Invalid bech32 address: {address}")
    if address != address.lower() and address != address.upper():
        raise invalid
    text = address.lower()
    separator = text.rfind("1")
    if separator < 1 or separator + 7 > len(text):
        raise invalid
    hrp, data_part = text[:separator], text[separator + 1 :]
    if any(ch not in _BECH32_CHARSET for ch in data_part):
        raise invalid
    data = [_BECH32_CHARSET.index(ch) for ch in data_part]
    expanded = [ord(ch) >> 5 for ch in hrp] + [0] + [ord(ch) & 31 for ch in hrp]
    if _bech32_polymod(expanded + data) not in _BECH32_CONSTANTS:
        raise invalid

    acc = bits = 0
    out = bytearray()
    for value in data[:-6]:
        acc = (acc << 5) | value
        bits += 5
        while bits >= 8:
            bits -= 8
            out.append((acc >> bits) & 0xFF)
    if bits >= 5 or (acc << (8 - bits)) & 0xFF:
        raise invalid
    return bytes(out)


def address_to_subaccount_id(address: str, nonce: int) -> str:
    """Subaccount id of a bech32 address: its hex bytes followed by the nonce."""
    return subaccount_id(f"0x{_bech32_decode(address).hex()}{nonce:024x}")


def get_burn_auction_subaccount(deps: Deps) -> str:
    config = load_config(deps)
    try:
        return subaccount_id(config.burn_auction_subaccount)
    except StdError:
        raise generic_err("Invalid burn auction subaccount ID") from None


def instantiate(deps: Deps, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
    save_config(
        deps,
        AuctionConfig(
            admin=msg.admin,
            adapter_contract=msg.adapter_contract,
            burn_auction_subaccount=msg.burn_auction_subaccount,
        ),
    )
    return Response()


def execute(deps: Deps, env: Env, info: MessageInfo, msg: ExecuteMsg) -> Response:
    match msg:
        case Cw20ReceiveMsg():
            return _receive_cw20(deps, env, info, msg)
        case SendNative(asset=asset):
            return send_native(deps, env, info, asset)
        case UpdateAdmin(admin=admin):
            return _update_admin(deps, info, admin)
    raise generic_err(f"unknown execute message: {type(msg).__name__}")


def query(deps: Deps, env: Env, msg: Any) -> bytes:
    if isinstance(msg, GetConfig):
        return to_json_binary(load_config(deps))
    raise generic_err(f"unknown query message: {type(msg).__name__}")


def _receive_cw20(deps: Deps, env: Env, info: MessageInfo, msg: Cw20ReceiveMsg) -> Response:
    asset = Asset(info=Token(contract_addr=info.sender), amount=msg.amount)
    messages = send_to_burn_auction(deps, env, info, asset)
    return (
        Response()
        .add_messages(messages)
        .add_attribute("action", "receive_cw20")
        .add_attribute("sender", msg.sender)
        .add_attribute("amount", msg.amount)
    )


def send_native(deps: Deps, env: Env, info: MessageInfo, asset: Asset) -> Response:
    if not asset.info.is_native_token():
        raise generic_err("Invalid asset: Expected a native token")
    messages = send_to_burn_auction(deps, env, info, asset)
    return Response().add_messages(messages).add_attribute("action", "send_native")


def _update_admin(deps: Deps, info: MessageInfo, admin: str) -> Response:
    config = load_config(deps)
    if info.sender != config.admin:
        raise generic_err("Unauthorized")
    save_config(deps, dataclasses.replace(config, admin=admin))
    return Response().add_attribute("action", "update_admin")


def _check_funds(info: MessageInfo, asset: Asset) -> None:
    if not info.funds:
        raise generic_err("No funds provided")
    denom = str(asset.info)
    coin = next((coin for coin in info.funds if coin.denom == denom), None)
    if coin is None:
        raise generic_err(
            f"Mismatched denomination: expected {denom}, but no matching funds provided"
        )
    if coin.amount != asset.amount:
        raise generic_err(
            f"Mismatched fund amount: expected {asset.amount}, provided {coin.amount}"
        )


def send_to_burn_auction(deps: Deps, env: Env, info: MessageInfo, asset: Asset) -> list[Any]:
    """Messages that move ``asset`` into the burn-auction subaccount."""
    destination = get_burn_auction_subaccount(deps)
    config = load_config(deps)
    amount = asset.amount
    messages: list[Any] = []

    if asset.info.is_native_token():
        _check_funds(info, asset)
        denom = str(asset.info)
    else:
        cw20_address = asset.info.contract_addr
        denom = f"factory/{config.adapter_contract}/{cw20_address}"
        messages.append(
            WasmExecute(
                contract_addr=cw20_address,
                msg=to_json_binary(
                    Cw20Send(contract=config.adapter_contract, amount=amount, msg=b"")
                ),
            )
        )

    source = address_to_subaccount_id(env.contract_address, 1)
    messages.append(
        Deposit(
            sender=env.contract_address,
            subaccount_id=source,
            amount=Coin(denom=denom, amount=amount),
        )
    )
    messages.append(
        ExternalTransfer(
            sender=env.contract_address,
            source_subaccount_id=source,
            destination_subaccount_id=destination,
            amount=Coin(denom=denom, amount=amount),
        )
    )
    return messages