# meshsec

Core logic of a mesh security module for a staking chain. Authorised
consumer contracts may mint "virtual" bonding tokens and delegate them to
validators, up to a maximum cap for each contract. A scheduler keyed by
block height triggers a periodic rebalance of each contract.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `meshsec.keeper`: `Keeper` holds the max cap limit and delegated total of
  each contract in a key/value store and provides `set_max_cap_limit`,
  `get_max_cap_limit`, `has_max_cap_limit`, `get_total_delegated`,
  `iterate_max_cap_limits`, `delegate`, `undelegate` and `rebalance`. It
  also handles task scheduling: `schedule_task`, `schedule_rebalance_task`,
  `has_scheduled_task`, `iterate_scheduled_tasks` and
  `exec_scheduled_tasks`. The last one runs each due task in a cached
  context under its own `GasMeter` and returns one `ExecResult` per task.
  `Keeper.with_sdk_keepers` builds a keeper over plain bank and staking
  keepers.
- `meshsec.context`: `Context` (block height, gas meter, event manager,
  logger, named stores), `KVStore` (an in-memory byte store that supports
  layering through `cache_context`) and `GasMeter`.
- `meshsec.interfaces`: protocols for the bank, staking and wasm keepers the
  module relies on. `BankKeeperAdapter` adds a local supply-offset tally.
  `StakingKeeperAdapter` adds `instant_undelegate`.
- `meshsec.handler`: `CustomMsgHandler.dispatch_msg` executes `virtual_stake`
  bond and unbond messages from contracts. `default_custom_msg_handler`
  authorises any contract that has a max cap set. `integrity_handler`
  rejects staking and stargate messages from contracts that have a max cap.
- `meshsec.query_plugin`: `chained_custom_querier` answers `bond_status`
  queries and passes every other query to the next handler.
  `query_decorator` wraps an existing handler in the same way.
- `meshsec.msg_server`: `MsgServer.set_virtual_staking_max_cap` checks the
  authority, stores the cap and schedules a rebalance task if none exists.
- `meshsec.querier`: `Querier` returns the cap and delegated amount of one
  contract, or of all contracts.
- `meshsec.module`: `AppModule` and `end_blocker`, which run the due
  rebalance tasks at the end of each block.
- `meshsec.messages`: `MsgSetVirtualStakingMaxCap` (with `validate_basic`,
  `sign_bytes`, `signers`), the query response types, and
  `parse_set_virtual_staking_max_cap_args`.
- `meshsec.contract`: the JSON messages exchanged with contracts.
- `meshsec.coins`, `meshsec.addresses`, `meshsec.keys`, `meshsec.events`,
  `meshsec.errors`: coins and coin parsing, bech32 addresses, store key
  layout, emitted events, and registered error kinds.

## Example

```python
from meshsec.addresses import acc_address_to_bech32
from meshsec.coins import Coin
from meshsec.messages import (
    MsgSetVirtualStakingMaxCap,
    parse_set_virtual_staking_max_cap_args,
)

authority = acc_address_to_bech32(bytes([1] * 20))
contract = acc_address_to_bech32(bytes([2] * 32))

msg = MsgSetVirtualStakingMaxCap(
    authority=authority,
    contract=contract,
    max_cap=Coin("stake", 1_000_000_000),
)
msg.validate_basic()  # raises MeshSecurityError on invalid input

same = parse_set_virtual_staking_max_cap_args([contract, "1000000000stake"], authority)
assert same == msg
```

Errors are raised as `meshsec.errors.MeshSecurityError`. Call
`error.is_kind(kind)` to check for a registered kind such as
`meshsec.errors.ERR_MAX_CAP_EXCEEDED`.

## What it does not do

- It has no command-line tool, no network server and no gRPC or REST
  endpoints. The message and query services are plain Python classes.
- State lives only in the in-memory `KVStore`. Nothing is written to disk.
- It ships no bank, staking or wasm keeper. The caller supplies objects that
  satisfy the protocols in `meshsec.interfaces`.