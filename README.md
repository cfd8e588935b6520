# reskernels

A library for running array loop bodies with modular redundancy. It can
also inject faults to exercise that redundancy and checkpoint buffers to
plain binary files.

## Modules

- `reskernels.resilient`: `ResilientExecutor.parallel_for(begin, end,
  functor, views)` calls `functor(i, *views)` for every `i` in the range.
  It does so on the original arrays and on duplicates of every writable
  array, then votes on the results element by element. If the results
  cannot be reconciled, it raises `DataCorruptionError`.
  - With `Redundancy.TRIPLE`, the body runs three times. With
    `fused=True`, the three runs are interleaved in one loop over three
    times the range.
  - With `Redundancy.DOUBLE`, the body runs twice. On a mismatch a second
    duplicate is taken from the original as it stands after its run, and
    the three arrays are voted on.
- `reskernels.duplicates`: `DuplicatesRegistry` makes, caches and resizes
  the duplicates of each array. It keys them by the array's data address.
  - `duplicate` returns the array a run should use.
  - `combine` votes on every array of the current kernel.
  - `clear_map` forgets the current kernel's duplicates and `clear_cache`
    releases all cached duplicates.
  - `CombineDuplicates` performs the vote for one array. A majority of
    two repairs the original.
  - `values_equal` is the comparison used in the vote. Floating-point
    values match when they differ by less than 1e-8; all other values
    must be exactly equal.
- `reskernels.injector`: `ErrorSettings(error_rate)` takes a rate in
  (0, 1]. `ErrorInjectionTracker` overwrites geometrically spaced elements
  of an original and its two duplicates with random noise. It counts the
  injected errors and the time spent injecting, and `report()` returns a
  summary. `inject_indices` decodes a linear position, with the first
  dimension varying fastest.
- `reskernels.stdfile_accessor`: `StdFileAccessor` reads and writes one
  buffer to one binary file.
  - A path that starts with `/` or `./` is used as given. Any other path
    is taken relative to `default_path`.
  - A short or missing file on read is logged, not raised.
- `reskernels.stdfile_space`: `StdFileSpace` pairs host buffers with file
  accessors through `register_mirror`.
  - `checkpoint_views` writes every host buffer to its file.
  - `restore_all_views` and `restore_view` read the files back into the
    host buffers.
  - `checkpoint_create_view_targets` creates empty files for all
    registered buffers.
- `reskernels.expression`: evaluates unsigned integer expressions.
  - Expressions may use decimal literals, `{NAME}` variables, parentheses
    and `+ - / * %`.
  - There is no operator precedence: an operator takes everything to its
    right, so `2*3+4` is `2*(3+4)`.
  - Results wrap modulo 2**64.
  - An unterminated group or variable raises `ExpressionSyntaxError`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
import numpy as np

from reskernels.duplicates import DuplicatesRegistry, Redundancy
from reskernels.resilient import ResilientExecutor

data = np.zeros(8)
executor = ResilientExecutor(Redundancy.TRIPLE, DuplicatesRegistry(), None, None, False)

def body(i, out):
    out[i] = i * 2.0

executor.parallel_for(0, 8, body, [data])
```

Checkpointing a buffer to a file and restoring it:

```python
from reskernels.stdfile_space import StdFileSpace

space = StdFileSpace("/tmp")
buffer = bytearray(b"hello")
accessor = space.allocate(len(buffer), "buffer.bin")
space.register_mirror("buffer", buffer, accessor)
space.checkpoint_views()      # writes /tmp/buffer.bin
buffer[:] = b"xxxxx"
space.restore_view("buffer")  # buffer is b"hello" again
```

Evaluating an expression:

```python
from reskernels.expression import resolve_arithmetic

node = resolve_arithmetic("{DATA_SIZE}/{MPI_SIZE}", {"DATA_SIZE": 1024, "MPI_SIZE": 4})
node.evaluate()  # 256
```

## What it does not do

- There is no HDF5 storage. The expression evaluator stands alone, and
  nothing in the package reads or writes HDF5 datasets or computes
  hyperslab selections.
- Loop bodies run sequentially in Python; there is no thread-parallel
  execution.
- The package has no command-line interface.