# fsbroker

`fsbroker` watches directories and turns the stream of low-level file system
notifications into a small number of meaningful actions. Events that arrive
within one tick are grouped per file and deduplicated. Moves and renames are
recognised as such, and so are non-empty file creations. Hidden files and
common system files can be ignored.

Watching is done with `watchdog`; the grouping rules follow the conventions of
the platform the broker runs on (Linux, macOS or Windows).

## Installation

```
pip install fsbroker
```

## Usage

```python
from fsbroker.broker import FSBroker
from fsbroker.config import default_config
from fsbroker.events import OpType

broker = FSBroker(default_config())
broker.add_recursive_watch("/path/to/watch")
broker.start()

try:
    while True:
        action = broker.next(timeout=1.0)
        if action is None or action.type is OpType.NOOP:
            continue
        if action.type is OpType.RENAME:
            print("renamed", action.properties.get("OldPath"), "->", action.subject.path)
        else:
            print(action.type, action.subject.path)
finally:
    broker.stop()
```

`FSBroker` takes an optional `FSConfig`, and the keyword arguments `platform`
(a `fsbroker.osrules.Platform`, defaulting to the current one) and
`action_filter`, a callable stored as `broker.filter` that drops every action
for which it returns false.

Methods of `FSBroker`:

- `add_recursive_watch(path)`: watch `path` and every directory below it.
  After this has been called once, newly created directories are watched
  automatically.
- `add_watch(path)`: watch a single directory and record its entries.
- `remove_watch(path)`: stop watching `path` and forget every tracked entry
  whose path starts with it.
- `start()` / `stop()`: start and stop the background threads.
- `next(timeout=None)`: the next action, or `None` after `timeout` seconds.
- `error(timeout=None)`: the next error, or `None` after `timeout` seconds.
  Errors are reported here when checking whether a file is hidden fails.
- `iter_paths()`: the `(path, FSInfo)` pairs currently tracked.

### Actions

Each emitted `FSAction` (from `fsbroker.events`) carries:

- `type`: an `OpType` — `CREATE`, `WRITE`, `RENAME`, `REMOVE`, `CHMOD` or `NOOP`
- `timestamp`: the time of the event the action was started from
- `subject`: an `FSInfo` (`id`, `path`, `size`, `mod_time`, `mode`) for the
  file; `None` for `NOOP` actions
- `events`: the `FSEvent` objects folded into this action
- `properties`: extra details, such as `"OldPath"` for renames or `"Message"`
  explaining a `NOOP`

`NOOP` actions report events that turned out to be irrelevant, for example a
file that was created and removed again within one tick. On Linux, `FSInfo`
records only the file id and mode; size and modification time are filled in
on macOS and Windows.

### Configuration

`fsbroker.config.default_config()` returns an `FSConfig` with:

| field                 | default | meaning                                       |
|-----------------------|---------|-----------------------------------------------|
| `timeout`             | 0.3 s   | how long events are collected before grouping |
| `ignore_sys_files`    | `True`  | skip common system and editor files           |
| `ignore_hidden_files` | `True`  | skip hidden files                             |
| `emit_chmod`          | `False` | emit permission-change actions                |

A `timeout` of zero or less falls back to 0.3 seconds.

### Lower-level pieces

The grouping logic can be used without a running watcher. Push `FSEvent`
objects onto a `fsbroker.eventstack.EventStack` and pass it, with an
`fsbroker.fsmap.FSMap` of known files, to `resolve_events` in
`fsbroker.linux_resolver`, `fsbroker.darwin_resolver` or
`fsbroker.windows_resolver`; it returns the resulting actions and updates the
map. `FSBroker.handle_event(raw)` and `FSBroker.resolve(stack)` expose the same
steps on a broker. `fsbroker.osrules` holds the per-platform hidden-file and
system-file rules.

### Debug logging

Call `fsbroker.broker.enable_debug_logging()` to print the broker's debug
messages to standard output.

## What it does not do

`fsbroker` is a library only: it has no command-line tool, and it keeps its
record of watched files in memory, with nothing stored between runs.