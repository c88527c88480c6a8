"""Single swap hops and the chain state the router reads while routing."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar

from choicecontracts.errors import StdError, generic_err
from choicecontracts.types import (
    Asset,
    AssetInfo,
    Coin,
    Cw20Send,
    Deps,
    Env,
    MessageInfo,
    NativeToken,
    Response,
    Token,
    WasmExecute,
    to_json_binary,
    validate_addr,
)

_CONFIG_KEY = "config"


@dataclass(frozen=True)
class PairInfo:
    """A trading pair registered with a factory."""

    asset_infos: tuple[AssetInfo, AssetInfo]
    contract_addr: str
    liquidity_token: str = ""


@dataclass(frozen=True)
class SwapOperation:
    """One hop of a route: swap ``offer_asset_info`` into ``ask_asset_info``."""

    offer_asset_info: AssetInfo
    ask_asset_info: AssetInfo

    wire_tag: ClassVar[str] = "choice"

    def target_asset_info(self) -> AssetInfo:
        return self.ask_asset_info


@dataclass(frozen=True)
class PairSwap:
    """The ``swap`` message understood by a pair contract."""

    offer_asset: Asset
    belief_price: str | None = None
    max_spread: str | None = None
    to: str | None = None
    deadline: int | None = None

    wire_tag: ClassVar[str] = "swap"
    wire_plain_ints: ClassVar[frozenset[str]] = frozenset({"deadline"})


@dataclass
class Querier:
    """In-memory view of the chain state a router queries.

    ``pairs`` maps a factory address to the pairs it knows; ``simulators`` and
    ``reverse_simulators`` map a pair address to a function that, given the
    offered (or asked) asset, returns the amount received (or required).
    """

    pairs: dict[str, list[PairInfo]] = field(default_factory=dict)
    balances: dict[tuple[str, str], int] = field(default_factory=dict)
    token_balances: dict[tuple[str, str], int] = field(default_factory=dict)
    simulators: dict[str, Callable[[Asset], int]] = field(default_factory=dict)
    reverse_simulators: dict[str, Callable[[Asset], int]] = field(default_factory=dict)

    def query_pair_info(self, factory: str, asset_infos: Sequence[AssetInfo]) -> PairInfo:
        wanted = set(asset_infos)
        for pair in self.pairs.get(factory, []):
            if set(pair.asset_infos) == wanted:
                return pair
        raise StdError("PairInfo not found", kind="Not found")

    def simulate(self, pair: str, offer_asset: Asset) -> int:
        """Amount returned by ``pair`` for ``offer_asset``."""
        try:
            simulator = self.simulators[pair]
        except KeyError:
            raise generic_err(f"no simulation available for pair {pair}") from None
        return simulator(offer_asset)

    def reverse_simulate(self, pair: str, ask_asset: Asset) -> int:
        """Amount that must be offered to ``pair`` to receive ``ask_asset``."""
        try:
            simulator = self.reverse_simulators[pair]
        except KeyError:
            raise generic_err(f"no reverse simulation available for pair {pair}") from None
        return simulator(ask_asset)

    def query_balance(self, address: str, denom: str) -> int:
        return self.balances.get((address, denom), 0)

    def query_token_balance(self, token: str, address: str) -> int:
        return self.token_balances.get((token, address), 0)


def _require_querier(deps: Deps) -> Querier:
    if deps.querier is None:
        raise generic_err("no querier available")
    return deps.querier


def _load_factory(deps: Deps) -> str:
    config = deps.storage.get(_CONFIG_KEY)
    if config is None:
        raise StdError("RouterConfig not found", kind="Not found")
    return config.choice_factory


def query_pool(querier: Querier, asset_info: AssetInfo, address: str) -> int:
    """Balance of ``asset_info`` held by ``address``."""
    if isinstance(asset_info, NativeToken):
        return querier.query_balance(address, asset_info.denom)
    return querier.query_token_balance(asset_info.contract_addr, address)


def execute_swap_operation(
    deps: Deps,
    env: Env,
    info: MessageInfo,
    operation: SwapOperation,
    to: str | None,
    deadline: int | None,
) -> Response:
    """Swap the router's whole balance of the offer asset into the ask asset."""
    if env.contract_address != info.sender:
        raise generic_err("unauthorized")

    factory = _load_factory(deps)
    querier = _require_querier(deps)
    offer_info = operation.offer_asset_info
    pair = querier.query_pair_info(factory, [offer_info, operation.ask_asset_info])

    if isinstance(offer_info, NativeToken):
        amount = querier.query_balance(env.contract_address, offer_info.denom)
    else:
        amount = querier.query_token_balance(
            validate_addr(offer_info.contract_addr), env.contract_address
        )

    message = asset_into_swap_msg(
        pair.contract_addr, Asset(info=offer_info, amount=amount), None, to, deadline
    )
    return Response().add_messages([message])


def asset_into_swap_msg(
    pair_contract: str,
    offer_asset: Asset,
    max_spread: Decimal | None,
    to: str | None,
    deadline: int | None,
) -> WasmExecute:
    """Message that offers ``offer_asset`` to ``pair_contract`` for a swap."""
    swap = PairSwap(
        offer_asset=offer_asset,
        belief_price=None,
        max_spread=None if max_spread is None else str(max_spread),
        to=to,
        deadline=deadline,
    )
    info: Any = offer_asset.info
    if isinstance(info, Token):
        return WasmExecute(
            contract_addr=info.contract_addr,
            msg=to_json_binary(
                Cw20Send(
                    contract=pair_contract,
                    amount=offer_asset.amount,
                    msg=to_json_binary(swap),
                )
            ),
            funds=[],
        )
    return WasmExecute(
        contract_addr=pair_contract,
        msg=to_json_binary(swap),
        funds=[Coin(denom=info.denom, amount=offer_asset.amount)],
    )