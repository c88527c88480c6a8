# choicecontracts

Pure-Python models of two exchange contracts:

- **router** (`choicecontracts.router`) checks multi-hop swap routes and turns each
  hop into its own swap message. It can also check that a minimum amount was
  received. It simulates routes forwards (`simulate_swap_operations`) and backwards
  (`reverse_simulate_swap_operations`) by asking a `choicecontracts.operations.Querier`.
- **burn auction forwarder** (`choicecontracts.auction`) takes native coins or CW20
  tokens. It produces the `Deposit` and `ExternalTransfer` messages that move them
  into the burn auction subaccount.

Every contract has the same entry points:

- `instantiate(deps, env, info, msg)`
- `execute(deps, env, info, msg)`
- `query(deps, env, msg)`

`instantiate` and `execute` return a `choicecontracts.types.Response`, which holds
`messages` and `attributes`. `query` returns compact JSON bytes, with amounts written
as decimal strings. When a contract refuses a message it raises
`choicecontracts.errors.StdError`. `str()` of that error reads like
`"Generic error: Unauthorized"`.

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

## Example: burn auction forwarder

```python
from choicecontracts.types import Deps, Env, MessageInfo, Coin, Asset, NativeToken
from choicecontracts import auction

deps = Deps()
env = Env(contract_address="inj1l2gcrfr6aenjyt5jddk79j7w5v0twskw6n70y8")
admin = MessageInfo(sender="inj1admin", funds=[Coin("inj", 1000)])

auction.instantiate(deps, env, admin, auction.InstantiateMsg(
    admin="inj1admin",
    adapter_contract="inj1adapter",
    burn_auction_subaccount="0x" + "11" * 32,
))

asset = Asset(info=NativeToken(denom="inj"), amount=1000)
response = auction.execute(deps, env, admin, auction.SendNative(asset=asset))
# response.messages: [Deposit(...), ExternalTransfer(...)]
# response.attributes: [("action", "send_native")]
```

The contract address must be a valid bech32 address, because the source subaccount id
is derived from it (`auction.address_to_subaccount_id`). The configured
`burn_auction_subaccount` must be `0x` followed by 64 hex digits.

A `Cw20ReceiveMsg` passed to `execute` produces three messages: a CW20 `send` to the
adapter contract, then a deposit and a transfer of the denomination
`factory/<adapter>/<cw20 address>`.

`execute` raises `StdError` in these cases:

- a native asset is sent without funds;
- the funds sent do not match the asset in denomination or amount;
- `SendNative` is given a CW20 asset;
- `UpdateAdmin` comes from anyone but the current admin.

`query(deps, env, auction.GetConfig())` returns the stored configuration as JSON.

## Example: router

```python
from choicecontracts import router
from choicecontracts.operations import PairInfo, Querier, SwapOperation
from choicecontracts.types import Deps, Env, MessageInfo, NativeToken, Token

pair = PairInfo(asset_infos=(NativeToken("inj"), Token("inj1token")), contract_addr="inj1pair")
querier = Querier(
    pairs={"inj1factory": [pair]},
    simulators={"inj1pair": lambda asset: asset.amount * 2},
)
deps = Deps(querier=querier)
router.instantiate(deps, Env(), MessageInfo(sender="creator"),
                   router.InstantiateMsg(choice_factory="inj1factory"))

route = [SwapOperation(offer_asset_info=NativeToken("inj"), ask_asset_info=Token("inj1token"))]
router.simulate_swap_operations(deps, 100, route)                            # 200
router.query(deps, Env(), router.SimulateSwapOperations(offer_amount=100, operations=route))
# b'{"amount":"200"}'
```

`execute` accepts the following messages:

- `ExecuteSwapOperations` creates one `ExecuteSwapOperation` call back to the router
  per hop. The last hop pays out to `to`, or to the sender if `to` is not given.
  When `minimum_receive` is set, an `AssertMinimumReceive` check is added at the end.
- `Cw20ReceiveMsg` starts the same kind of route. Its `msg` holds the JSON of an
  `execute_swap_operations` hook.
- `ExecuteSwapOperation` may only be sent by the router itself. It swaps the router's
  whole balance of the offer asset.

`assert_operations` rejects a route that is empty or that ends in more than one
output asset.

## What this package does not do

The package does not connect to a chain and does not run a node. It uses no network.

- Storage is the in-memory `Deps.storage` dictionary.
- Chain state comes from a `Querier` that you fill with pairs, balances and
  simulation functions.
- The messages in a `Response` are returned as values and never dispatched.
- No JSON schema files are generated for the messages.

## Tests

```
pytest
```