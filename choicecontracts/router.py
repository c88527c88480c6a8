"""Router contract: chains swaps across pairs of a factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from choicecontracts.errors import StdError, generic_err
from choicecontracts.operations import (
    _CONFIG_KEY,
    SwapOperation,
    _load_factory,
    _require_querier,
    execute_swap_operation,
    query_pool,
)
from choicecontracts.types import (
    Asset,
    AssetInfo,
    Cw20ReceiveMsg,
    Deps,
    Env,
    MessageInfo,
    NativeToken,
    Response,
    Token,
    WasmExecute,
    from_json,
    to_json_binary,
    validate_addr,
)


@dataclass(frozen=True)
class RouterConfig:
    """Stored configuration: the factory whose pairs are routed through."""

    choice_factory: str


@dataclass(frozen=True)
class InstantiateMsg:
    choice_factory: str


@dataclass(frozen=True)
class ExecuteSwapOperations:
    """Run a whole route, optionally checking the amount finally received."""

    operations: list[SwapOperation]
    minimum_receive: int | None = None
    to: str | None = None
    deadline: int | None = None

    wire_tag: ClassVar[str] = "execute_swap_operations"
    wire_plain_ints: ClassVar[frozenset[str]] = frozenset({"deadline"})


@dataclass(frozen=True)
class ExecuteSwapOperation:
    """Run one hop; only the router itself may send this."""

    operation: SwapOperation
    to: str | None = None
    deadline: int | None = None

    wire_tag: ClassVar[str] = "execute_swap_operation"
    wire_plain_ints: ClassVar[frozenset[str]] = frozenset({"deadline"})


@dataclass(frozen=True)
class AssertMinimumReceive:
    """Fail unless ``receiver`` gained at least ``minimum_receive`` since ``prev_balance``."""

    asset_info: AssetInfo
    prev_balance: int
    minimum_receive: int
    receiver: str

    wire_tag: ClassVar[str] = "assert_minimum_receive"


@dataclass(frozen=True)
class ConfigQuery:
    wire_tag: ClassVar[str] = "config"


@dataclass(frozen=True)
class SimulateSwapOperations:
    offer_amount: int
    operations: list[SwapOperation]

    wire_tag: ClassVar[str] = "simulate_swap_operations"


@dataclass(frozen=True)
class ReverseSimulateSwapOperations:
    ask_amount: int
    operations: list[SwapOperation]

    wire_tag: ClassVar[str] = "reverse_simulate_swap_operations"


def _optional_addr(addr: str | None) -> str | None:
    return None if addr is None else validate_addr(addr)


def instantiate(deps: Deps, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
    deps.storage[_CONFIG_KEY] = RouterConfig(choice_factory=validate_addr(msg.choice_factory))
    return Response()


def execute(deps: Deps, env: Env, info: MessageInfo, msg: Any) -> Response:
    match msg:
        case Cw20ReceiveMsg():
            return receive_cw20(deps, env, info, msg)
        case ExecuteSwapOperations():
            return execute_swap_operations(
                deps,
                env,
                info.sender,
                msg.operations,
                msg.minimum_receive,
                _optional_addr(msg.to),
                msg.deadline,
            )
        case ExecuteSwapOperation():
            return execute_swap_operation(
                deps, env, info, msg.operation, _optional_addr(msg.to), msg.deadline
            )
        case AssertMinimumReceive():
            return assert_minimum_receive(
                deps,
                msg.asset_info,
                msg.prev_balance,
                msg.minimum_receive,
                validate_addr(msg.receiver),
            )
    raise generic_err(f"unknown execute message: {type(msg).__name__}")


def _asset_info_from_json(data: Any) -> AssetInfo:
    (tag, body), = data.items()
    if tag == "native_token":
        return NativeToken(denom=body["denom"])
    if tag == "token":
        return Token(contract_addr=body["contract_addr"])
    raise ValueError(f"unknown asset info variant {tag!r}")


def _operation_from_json(data: Any) -> SwapOperation:
    body = data["choice"]
    return SwapOperation(
        offer_asset_info=_asset_info_from_json(body["offer_asset_info"]),
        ask_asset_info=_asset_info_from_json(body["ask_asset_info"]),
    )


def _parse_hook(data: bytes) -> ExecuteSwapOperations:
    payload = from_json(data)
    try:
        body = payload["execute_swap_operations"]
        minimum = body.get("minimum_receive")
        deadline = body.get("deadline")
        return ExecuteSwapOperations(
            operations=[_operation_from_json(op) for op in body["operations"]],
            minimum_receive=None if minimum is None else int(minimum),
            to=body.get("to"),
            deadline=None if deadline is None else int(deadline),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise StdError(f"invalid hook message: {exc}", kind="Parse error") from None


def receive_cw20(deps: Deps, env: Env, info: MessageInfo, cw20_msg: Cw20ReceiveMsg) -> Response:
    """Start a route paid for with CW20 tokens sent to the router."""
    sender = validate_addr(cw20_msg.sender)
    hook = _parse_hook(cw20_msg.msg)
    return execute_swap_operations(
        deps,
        env,
        sender,
        hook.operations,
        hook.minimum_receive,
        _optional_addr(hook.to),
        hook.deadline,
    )


def execute_swap_operations(
    deps: Deps,
    env: Env,
    sender: str,
    operations: list[SwapOperation],
    minimum_receive: int | None,
    to: str | None,
    deadline: int | None,
) -> Response:
    """Messages running each hop in turn; the last hop pays out to ``to``."""
    if not operations:
        raise generic_err("must provide operations")
    assert_operations(operations)

    recipient = to if to is not None else sender
    target_asset_info = operations[-1].target_asset_info()
    last = len(operations) - 1

    messages: list[Any] = [
        WasmExecute(
            contract_addr=env.contract_address,
            msg=to_json_binary(
                ExecuteSwapOperation(
                    operation=op,
                    to=recipient if position == last else None,
                    deadline=deadline,
                )
            ),
            funds=[],
        )
        for position, op in enumerate(operations)
    ]

    if minimum_receive is not None:
        receiver_balance = query_pool(_require_querier(deps), target_asset_info, recipient)
        messages.append(
            WasmExecute(
                contract_addr=env.contract_address,
                msg=to_json_binary(
                    AssertMinimumReceive(
                        asset_info=target_asset_info,
                        prev_balance=receiver_balance,
                        minimum_receive=minimum_receive,
                        receiver=recipient,
                    )
                ),
                funds=[],
            )
        )

    return Response().add_messages(messages)


def assert_minimum_receive(
    deps: Deps,
    asset_info: AssetInfo,
    prev_balance: int,
    minimum_receive: int,
    receiver: str,
) -> Response:
    balance = query_pool(_require_querier(deps), asset_info, receiver)
    if balance < prev_balance:
        raise StdError(f"Cannot Sub with {balance} and {prev_balance}", kind="Overflow")
    swap_amount = balance - prev_balance
    if swap_amount < minimum_receive:
        raise generic_err(
            f"assertion failed; minimum receive amount: {minimum_receive}, "
            f"swap amount: {swap_amount}"
        )
    return Response()


def query(deps: Deps, env: Env, msg: Any) -> bytes:
    match msg:
        case ConfigQuery():
            return to_json_binary(query_config(deps))
        case SimulateSwapOperations():
            amount = simulate_swap_operations(deps, msg.offer_amount, msg.operations)
            return to_json_binary({"amount": amount})
        case ReverseSimulateSwapOperations():
            amount = reverse_simulate_swap_operations(deps, msg.ask_amount, msg.operations)
            return to_json_binary({"amount": amount})
    raise generic_err(f"unknown query message: {type(msg).__name__}")


def query_config(deps: Deps) -> dict[str, str]:
    return {"choice_factory": _load_factory(deps)}


def simulate_swap_operations(deps: Deps, offer_amount: int, operations: list[SwapOperation]) -> int:
    """Amount received at the end of the route for ``offer_amount``."""
    factory = _load_factory(deps)
    if not operations:
        raise generic_err("must provide operations")
    querier = _require_querier(deps)
    amount = offer_amount
    for op in operations:
        pair = querier.query_pair_info(factory, [op.offer_asset_info, op.ask_asset_info])
        amount = querier.simulate(
            pair.contract_addr, Asset(info=op.offer_asset_info, amount=amount)
        )
    return amount


def reverse_simulate_swap_operations(
    deps: Deps, ask_amount: int, operations: list[SwapOperation]
) -> int:
    """Amount to offer at the start of the route to receive ``ask_amount``."""
    factory = _load_factory(deps)
    if not operations:
        raise generic_err("must provide operations")
    querier = _require_querier(deps)
    amount = ask_amount
    for op in reversed(operations):
        pair = querier.query_pair_info(factory, [op.offer_asset_info, op.ask_asset_info])
        amount = querier.reverse_simulate(
            pair.contract_addr, Asset(info=op.ask_asset_info, amount=amount)
        )
    return amount


def assert_operations(operations: list[SwapOperation]) -> None:
    """Check that the route ends in exactly one output asset."""
    outputs: dict[str, bool] = {}
    for op in operations:
        outputs.pop(str(op.offer_asset_info), None)
        outputs[str(op.ask_asset_info)] = True
    if len(outputs) != 1:
        raise generic_err("invalid operations; multiple output token")