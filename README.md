# opmrelease

Helpers for tracking the state of a module release as it is reconciled:
status conditions, failure counters, reconcile digests, a bounded history
of attempts, and synthesis of a temporary CUE module that declares the
release. The package has no dependencies beyond the standard library.

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

- `opmrelease.conditions` – `ConditionStatus`, `Condition`, `ConditionSet`
  and the `mark_*` helpers, plus condition type and reason constants such
  as `READY_CONDITION` and `RENDER_FAILED_REASON`.
- `opmrelease.counters` – `CounterField`, `FailureCounters`, `ensure_counters`.
- `opmrelease.model` – `HistoryEntry` and `ReleaseStatus`.
- `opmrelease.digests` – `DigestSet`, `module_source_digest`,
  `config_digest`, `render_digest`, `is_noop`.
- `opmrelease.history` – `new_success_entry`, `new_failure_entry`,
  `record_history`, `next_sequence`, `MAX_HISTORY_ENTRIES`.
- `opmrelease.synthesis` – `ReleaseParams`, `synthesize_release` and the
  pinned `CATALOG_VERSION`, `CUE_LANGUAGE_VERSION` and `SYNTHESIS_MODULE`.

## Conditions

`ConditionSet` holds conditions keyed by type. `set` keeps a condition's
`last_transition_time` when its status does not change. The `mark_*`
functions keep `Ready`, `Reconciling` and `Stalled` consistent with each
other; their message arguments are `%`-style format strings.

```python
from opmrelease.conditions import ConditionSet, mark_reconciling, mark_ready

conditions = ConditionSet()
mark_reconciling(conditions, "Progressing", "applying %d resources", 3)
assert conditions.is_unknown("Ready")

mark_ready(conditions, "all resources applied")
assert conditions.is_true("Ready")
assert not conditions.has("Reconciling")
```

- `mark_stalled` sets `Stalled=True`, removes `Reconciling`, sets `Ready=False`.
- `mark_suspended` sets `Ready=False` with reason `Suspended` and message
  "Reconciliation is suspended", removing `Reconciling` and `Stalled`.
- `mark_not_ready` sets `Ready=False` with the given reason.
- `mark_drifted` sets `Drifted=True` ("N resource(s) drifted from desired
  state") without touching `Ready`; `clear_drifted` removes it.
- `mark_module_resolved` sets `ModuleResolved=True` ("module resolved: <ref>").

## Failure counters

`FailureCounters` has `reconcile`, `apply`, `prune` and `drift` counts.
`increment` and `reset` take a `CounterField` or its string value; unknown
names are ignored.

```python
from opmrelease.counters import CounterField, ensure_counters
from opmrelease.model import ReleaseStatus

status = ReleaseStatus()
counters = ensure_counters(status)   # created on first use
counters.increment(CounterField.APPLY)
counters.reset("apply")
```

## Digests

All digests have the form `sha256:<hex>`.

```python
from opmrelease.digests import DigestSet, config_digest, is_noop, module_source_digest

source = module_source_digest("opmodel.dev/modules/hello@v0", "v0.1.0")
config = config_digest(b'{"message": "hello"}')
```

- `config_digest` hashes JSON values in a canonical form (sorted keys,
  compact), so key order does not matter. `None` or empty input hashes the
  empty string; input that is not valid JSON is hashed as given.
- `render_digest` takes rendered resources as mappings (`apiVersion`,
  `kind`, `metadata.namespace`, `metadata.name`), sorts them by group, kind,
  namespace and name, and hashes their canonical JSON. It raises
  `ValueError` if a resource cannot be serialized.
- `is_noop` is true only when every field of the last applied `DigestSet`
  is set and all four match the current set.

## History

```python
from opmrelease.digests import DigestSet
from opmrelease.history import new_success_entry, record_history
from opmrelease.model import ReleaseStatus

status = ReleaseStatus()
record_history(status, new_success_entry("reconcile", "complete", DigestSet(), 1))
```

`record_history` gives the entry the next sequence number (one more than
the highest already recorded), puts it first, keeps at most
`MAX_HISTORY_ENTRIES` (10) entries, and returns the entry as recorded.
Entries built by `new_success_entry` and `new_failure_entry` carry the
current UTC time as both start and finish.

## Release synthesis

```python
import shutil
from opmrelease.synthesis import ReleaseParams, synthesize_release

directory = synthesize_release(ReleaseParams(
    name="cert-manager",
    namespace="cert-manager",
    module_path="opmodel.dev/modules/cert_manager@v0",
    module_version="v0.2.1",
))
try:
    ...  # evaluate the module in `directory`
finally:
    shutil.rmtree(directory)
```

The directory holds `cue.mod/module.cue` and `release.cue`; the caller
removes it when done. A missing parameter raises `ValueError` ("name is
required", and so on); a write failure raises `OSError` and leaves no
directory behind.

## What this package does not do

It only keeps the bookkeeping for a release. It does not talk to a cluster,
apply or prune resources, run a reconcile loop, or evaluate the CUE modules
it writes; those are left to the program that uses it.