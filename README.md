# patronus

A library for building and manipulating bit-vector and array expressions, the
kind used to describe hardware designs and SMT queries.

Expressions live in a `Context` (`patronus.context`), which interns every node:
building the same expression twice returns the same `ExprRef`, so reference
equality implies structural equality. The boolean literals `false` and `true`
are created first and are available through `get_false()` and `get_true()`.

## Modules

- `patronus.values`: `BitVecValue`, an immutable fixed-width bit-vector with
  wrapping arithmetic, bit-wise, shift, division/remainder, slice, extend,
  concatenation and comparison operations; `ArrayValue`, a mutable sparse array
  of bit-vectors with a default value (`select`, `store`, `non_default_entries`,
  `is_equal`, `copy`).
- `patronus.nodes`: `ExprRef`, `StringRef`, the types `BVType` and `ArrayType`,
  and one frozen dataclass per expression kind (`BVSymbol`, `BVLiteral`,
  `BVAdd`, `BVIte`, `ArrayStore`, ...). Every node offers `children()`,
  `num_children()` and `with_children()`.
- `patronus.context`: `Context`, which creates symbols, literals and every
  bit-vector and array operation and checks operand widths as it does so
  (raising `TypeCheckError` on a mismatch).
- `patronus.builder`: `Builder` and `build(ctx, fn)` for composing nested
  expressions in a single call.
- `patronus.typecheck`: `type_check` for one node, `get_type`, `get_bv_type`,
  `get_array_type`, `is_bool`, and `TypeCheckError`.
- `patronus.evaluate`: `eval_bv_expr`, `eval_array_expr` and `eval_expr`.
  Symbol values come from a `SymbolValueStore`, a mapping from `ExprRef` to
  value, or a sequence of `(ExprRef, value)` pairs. A value given for any
  sub-expression replaces its evaluation. A symbol without a value raises
  `EvalError`.
- `patronus.traversal`: `bottom_up`, `bottom_up_multi_pat` and `top_down`
  (steered by `TraversalCmd`), all without recursion.
- `patronus.transform`: `simple_transform_expr` and `do_transform_expr`, which
  rewrite expression DAGs bottom up in `SINGLE_STEP` or `FIXED_POINT` mode
  (`ExprTransformMode`).
- `patronus.meta`: `SparseExprMap`, `DenseExprMap`, `SparseExprSet`,
  `DenseExprSet` and `get_fixed_point`.
- `patronus.analysis`: `count_expr_uses`, counting how often each expression
  below a set of roots is used (saturating at `MAX_USE_COUNT`).
- `patronus.simplify`: `Simplifier`, which caches results across calls,
  `simplify_single_expression` and the per-node dispatcher `simplify_node`.
  The individual rules live in `patronus.simplify_logic` (ite, equality, and,
  or, xor, implies, unsigned greater-or-equal, not) and
  `patronus.simplify_bits` (concat, slice, zero/sign extension, shifts, add,
  mul).
- `patronus.witness`: `Witness` and `ArrayInitValue`, records describing a
  counterexample trace, and `init_to_value`.

## Installation

```
pip install .
```

## Example

```python
from patronus.context import Context
from patronus.builder import build
from patronus.evaluate import eval_bv_expr
from patronus.simplify import simplify_single_expression
from patronus.values import BitVecValue

ctx = Context()
a = ctx.bv_symbol("a", 8)
b = ctx.bv_symbol("b", 8)

expr = build(ctx, lambda c: c.add(c.and_(a, c.ones(8)), b))

value = eval_bv_expr(
    ctx,
    [(a, BitVecValue(3, 8)), (b, BitVecValue(4, 8))],
    expr,
)
print(value.to_signed())  # 7

simplified = simplify_single_expression(ctx, expr)
print(simplified == ctx.add(a, b))  # True
```

## What it does not do

The package works on expressions only. It does not talk to SMT solvers, does
not run model checking itself, and has no text parser or printer for
expressions; `Witness` is only a container for a trace produced elsewhere.
There is no command-line tool.

## Running the tests

```
pip install .[test]
pytest
```