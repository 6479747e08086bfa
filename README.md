# coolmyir

A compiler back-end library for the Cool language. It models the class
hierarchy and object layout. It also provides an intermediate representation
(IR) with control flow graphs, dominance analysis, construction of static
single assignment (SSA) form and dead instruction removal.

## Modules

- `coolmyir.names`
  - `NameGenerator` hands out numbered names for each `Comment` kind, such as
    `entry_block0`, `true_block_1` and `int_const_0`.
  - `reset()` restarts the numbering of the per-function block names.
  - `bool_constant()` wraps around after two names.
  - `method_full_name(klass, method, delim)` joins a class name and a method
    name with the given delimiter.
- `coolmyir.klass`
  - `ClassDecl`, `Feature` and `Formal` describe classes.
  - `ClassNode` arranges them into an inheritance tree.
  - `KlassBuilder` builds a `Klass` for each class. A `Klass` holds the
    inherited fields first and a dispatch table in which overriding methods
    keep their parent's slot.
  - Tags are assigned in preorder, starting at 1. Each class also records the
    largest tag among its descendants (`child_max_tag`) and whether it is a
    leaf.
  - `Klass` gives the object size, field offsets, `method_index`,
    `method_full_name` (for example `Main_main`), and the `-init`, `-protObj`
    and `_dispTab` symbol names.
- `coolmyir.layout`
  - `HeaderLayout` describes the object header: mark (4 bytes), tag
    (4 bytes), size (8 bytes) and dispatch table (8 bytes). Each element
    provides its size and offset.
  - `header_field_index(offset)` maps a byte offset to a header element or a
    field.
- `coolmyir.operands`
  - `OperandType` lists the operand types.
  - `Operand`, `Constant` (64-bit values) and `Variable` are the values the
    IR works on. A `Variable` remembers the variable it was renamed from.
  - `StructuredOperand`, `GlobalConstant` and `GlobalVariable` describe
    structured global data.
  - `IdCounter` numbers operands.
- `coolmyir.instructions`
  - Instruction classes: `Load`, `Store`, the arithmetic instructions (`Add`,
    `Sub`, `Mul`, `Div`, `Shl`, `Or`, `Xor`), the comparisons (`LT`, `LE`,
    `EQ`, `GT`), `Not`, `Neg`, `Move`, `Branch`, `CondBranch`, `Call`, `Ret`
    and `Phi`.
  - Every instruction keeps its operands' def-use chains up to date.
- `coolmyir.ir`
  - `Block`, `Function` and `Module`.
  - `IRBuilder` appends instructions to the current block. It wires CFG edges
    for branches.
  - When both operands of a binary operation are constants, the builder folds
    the operation into a constant.
  - A load from a `GlobalConstant` at a constant offset resolves to the
    stored element.
  - `Module.dump()` prints the whole module.
- `coolmyir.cfg`
  - `CFG.traversal(DFSType...)` walks the graph in preorder, postorder or
    reverse postorder.
  - `CFG.dominance()` returns a `DominanceInfo`. It contains immediate
    dominators, the dominator tree and dominance frontiers, computed with the
    Cooper–Harvey–Kennedy algorithm.
- `coolmyir.runtime`
  - `Runtime(module)` declares the runtime functions in a module: `_equals`,
    `_gc_alloc`, `_case_abort`, `_case_abort_2`, `_dispatch_abort`,
    `_init_runtime` and `_finish_runtime`.
  - It also declares the `_stack_pointer` and `_frame_pointer` globals.
  - It gives the IR type of each header element.
- `coolmyir.ssa`
  - `SSAConstruction().run(func)` inserts phi functions at dominance
    frontiers.
  - It renames variables along the dominator tree.
  - It removes phi functions whose results are never used.
- `coolmyir.die`
  - `DIE().run(func)` deletes instructions whose result has no uses.
  - Stores and calls are always kept.

## Example

```python
from coolmyir.die import DIE
from coolmyir.ir import Function, IRBuilder, Module
from coolmyir.operands import Constant, OperandType, Variable
from coolmyir.ssa import SSAConstruction

module = Module()
func = Function("f", [Variable(OperandType.POINTER, "self")], OperandType.INT64)
module.add(func)

builder = IRBuilder(module)
builder.set_current_function(func)
entry = builder.new_block("entry_block0")
func.set_cfg(entry)
builder.set_current_block(entry)

x = Variable(OperandType.INT64, "x")
builder.move(Constant(1, OperandType.INT64), x)
builder.ret(x)

SSAConstruction().run(func)
DIE().run(func)
print(module.dump())
```

Class layouts:

```python
from coolmyir.klass import ClassDecl, ClassNode, Feature, KlassBuilder

obj = ClassNode(ClassDecl("Object", None, [Feature("abort", "Object", is_method=True)]))
main = ClassNode(ClassDecl("Main", "Object", [Feature("x", "Int")]))
obj.children.append(main)

builder = KlassBuilder(obj)
print(builder.tag("Main"), builder.klass("Main").size)   # 2 32
print(builder.klass("Main").method_full_name("abort"))   # Object_abort
```

## What it does not do

The package has no front end. It does not lex, parse or type-check Cool
programs.

It also has no emitter that turns Cool expressions into IR. You build IR
yourself with `IRBuilder`.

It produces no object files or assembly, and it has no command-line program.
The only passes it provides are `SSAConstruction` and `DIE`.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```