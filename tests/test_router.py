import pytest

from choicecontracts import router
from choicecontracts.errors import StdError
from choicecontracts.operations import PairInfo, Querier, SwapOperation
from choicecontracts.router import (
    AssertMinimumReceive,
    ConfigQuery,
    ExecuteSwapOperation,
    ExecuteSwapOperations,
    InstantiateMsg,
    ReverseSimulateSwapOperations,
    SimulateSwapOperations,
)
from choicecontracts.types import (
    Asset,
    Cw20ReceiveMsg,
    Deps,
    Env,
    MessageInfo,
    NativeToken,
    Token,
    from_json,
    to_json_binary,
)

FACTORY = "factory0000"
ASSET1_ADDR = "asset0001"
ASSET2_ADDR = "asset0002"
UKRW = NativeToken(denom="ukrw")
INJ = NativeToken(denom="inj")
A1 = Token(contract_addr=ASSET1_ADDR)
A2 = Token(contract_addr=ASSET2_ADDR)
ROUTE = [
    SwapOperation(offer_asset_info=UKRW, ask_asset_info=A1),
    SwapOperation(offer_asset_info=A1, ask_asset_info=INJ),
]


def _deps(**querier_kwargs):
    querier = Querier(
        pairs={
            FACTORY: [
                PairInfo(asset_infos=(UKRW, A1), contract_addr="pair0001"),
                PairInfo(asset_infos=(A1, INJ), contract_addr="pair0002"),
            ]
        },
        **querier_kwargs,
    )
    deps = Deps(querier=querier)
    router.instantiate(deps, Env(), MessageInfo(sender="creator"), InstantiateMsg(FACTORY))
    return deps


def test_instantiate_and_query_config():
    deps = _deps()
    assert router.query_config(deps) == {"choice_factory": FACTORY}
    assert from_json(router.query(deps, Env(), ConfigQuery())) == {"choice_factory": FACTORY}


def test_instantiate_rejects_bad_address():
    with pytest.raises(StdError):
        router.instantiate(Deps(), Env(), MessageInfo(sender="creator"), InstantiateMsg("Factory"))


def test_assert_operations_cases():
    with pytest.raises(StdError):
        router.assert_operations([])
    assert router.assert_operations(ROUTE) is None
    longer = ROUTE + [SwapOperation(offer_asset_info=INJ, ask_asset_info=A2)]
    assert router.assert_operations(longer) is None


def test_assert_operations_multiple_outputs():
    ops = [
        SwapOperation(offer_asset_info=UKRW, ask_asset_info=A1),
        SwapOperation(offer_asset_info=INJ, ask_asset_info=A2),
    ]
    with pytest.raises(StdError) as exc:
        router.assert_operations(ops)
    assert exc.value.message == "invalid operations; multiple output token"


def test_execute_swap_operations_empty():
    with pytest.raises(StdError) as exc:
        router.execute_swap_operations(_deps(), Env(), "sender0001", [], None, None, None)
    assert exc.value.message == "must provide operations"


def test_execute_swap_operations_messages():
    env = Env()
    res = router.execute_swap_operations(_deps(), env, "sender0001", ROUTE, None, None, 99)
    assert len(res.messages) == len(ROUTE)
    assert all(m.contract_addr == env.contract_address for m in res.messages)
    decoded = [from_json(m.msg)["execute_swap_operation"] for m in res.messages]
    assert decoded[0]["to"] is None
    assert decoded[1]["to"] == "sender0001"
    assert [d["deadline"] for d in decoded] == [99, 99]


def test_execute_swap_operations_with_minimum_receive():
    deps = _deps(balances={("recv0001", "inj"): 40})
    res = router.execute_swap_operations(deps, Env(), "sender0001", ROUTE, 10, "recv0001", None)
    assert len(res.messages) == len(ROUTE) + 1
    assert from_json(res.messages[-1].msg) == {
        "assert_minimum_receive": {
            "asset_info": {"native_token": {"denom": "inj"}},
            "prev_balance": "40",
            "minimum_receive": "10",
            "receiver": "recv0001",
        }
    }


def test_execute_dispatch_validates_to():
    msg = ExecuteSwapOperations(operations=ROUTE, to="BadAddress")
    with pytest.raises(StdError):
        router.execute(_deps(), Env(), MessageInfo(sender="sender0001"), msg)


def test_execute_single_operation_unauthorized():
    msg = ExecuteSwapOperation(operation=ROUTE[0])
    with pytest.raises(StdError) as exc:
        router.execute(_deps(), Env(), MessageInfo(sender="sender0001"), msg)
    assert exc.value.message == "unauthorized"


def test_receive_cw20_round_trip():
    hook = ExecuteSwapOperations(operations=ROUTE, to="recv0001", deadline=5)
    cw20 = Cw20ReceiveMsg(sender="sender0001", amount=10, msg=to_json_binary(hook))
    res = router.execute(_deps(), Env(), MessageInfo(sender=ASSET1_ADDR), cw20)
    decoded = [from_json(m.msg)["execute_swap_operation"] for m in res.messages]
    assert decoded[-1]["to"] == "recv0001"
    assert decoded[-1]["deadline"] == 5
    expected_ask = {"token": dict(contract_addr=ASSET1_ADDR)}
    assert decoded[0]["operation"]["choice"]["ask_asset_info"] == expected_ask


def test_receive_cw20_bad_hook():
    cw20 = Cw20ReceiveMsg(sender="sender0001", amount=10, msg=b"")
    with pytest.raises(StdError) as exc:
        router.receive_cw20(_deps(), Env(), MessageInfo(sender=ASSET1_ADDR), cw20)
    assert exc.value.kind == "Parse error"


def test_assert_minimum_receive_passes():
    deps = _deps(balances={("recv0001", "inj"): 150})
    res = router.execute(
        deps, Env(), MessageInfo(sender="x01"), AssertMinimumReceive(INJ, 100, 50, "recv0001")
    )
    assert res.messages == []


def test_assert_minimum_receive_fails():
    deps = _deps(balances={("recv0001", "inj"): 150})
    with pytest.raises(StdError) as exc:
        router.assert_minimum_receive(deps, INJ, 0, 200, "recv0001")
    assert str(exc.value) == (
        "Generic error: assertion failed; minimum receive amount: 200, swap amount: 150"
    )


def test_assert_minimum_receive_underflow():
    deps = _deps(balances={("recv0001", "inj"): 150})
    with pytest.raises(StdError) as exc:
        router.assert_minimum_receive(deps, INJ, 200, 1, "recv0001")
    assert exc.value.kind == "Overflow"


def test_simulate_swap_operations_chains_pairs():
    calls = []

    def first(asset):
        calls.append(asset)
        return 250

    def second(asset):
        calls.append(asset)
        return 42

    deps = _deps(simulators={"pair0001": first, "pair0002": second})
    assert router.simulate_swap_operations(deps, 100, ROUTE) == 42
    assert calls == [Asset(info=UKRW, amount=100), Asset(info=A1, amount=250)]
    raw = router.query(deps, Env(), SimulateSwapOperations(offer_amount=100, operations=ROUTE))
    assert from_json(raw) == {"amount": "42"}


def test_reverse_simulate_walks_backwards():
    calls = []

    def last_hop(asset):
        calls.append(asset)
        return 77

    def first_hop(asset):
        calls.append(asset)
        return 33

    deps = _deps(reverse_simulators={"pair0001": first_hop, "pair0002": last_hop})
    assert router.reverse_simulate_swap_operations(deps, 10, ROUTE) == 33
    assert calls == [Asset(info=INJ, amount=10), Asset(info=A1, amount=77)]
    raw = router.query(deps, Env(), ReverseSimulateSwapOperations(ask_amount=10, operations=ROUTE))
    assert from_json(raw) == {"amount": "33"}


def test_simulate_requires_operations_and_config():
    with pytest.raises(StdError) as exc:
        router.simulate_swap_operations(_deps(), 1, [])
    assert exc.value.message == "must provide operations"
    with pytest.raises(StdError) as exc:
        router.reverse_simulate_swap_operations(Deps(querier=Querier()), 1, ROUTE)
    assert exc.value.kind == "Not found"