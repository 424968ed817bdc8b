# monkeylang

Building blocks for the Monkey programming language: syntax tree nodes,
a tree rewriter, a tree-walking evaluator, and a bytecode compiler with
its instruction set. There are no runtime dependencies.

## Installation

    pip install .

For running the test suite:

    pip install ".[test]"
    pytest

## Modules

- `monkeylang.syntax`: the syntax tree node classes (`Program`,
  `LetStatement`, `ReturnStatement`, `ExpressionStatement`,
  `BlockStatement`, `Identifier`, `Boolean`, `IntegerLiteral`,
  `StringLiteral`, `PrefixExpression`, `InfixExpression`, `IfExpression`,
  `FunctionLiteral`, `CallExpression`, `ArrayLiteral`, `IndexExpression`,
  `HashLiteral`, `MacroLiteral`). They are dataclasses; every node has
  `token_literal()`, and `str(node)` renders it as source-like text, e.g.
  `(x + 2)`. `HashLiteral.pairs` is a list of `(key, value)` tuples.
- `monkeylang.modify`: `modify(node, modifier)` walks a tree children
  first, replacing each child in place with what `modifier` returns, and
  returns `modifier(node)`.
- `monkeylang.bytecode`: the `Opcode` enum, `Definition`,
  `make(op, *operands)` to encode one instruction (big-endian operands),
  `lookup(op)` (raises `ValueError` for an undefined opcode),
  `read_operands`, `read_uint8`, `read_uint16`, and
  `format_instructions` for a disassembly listing.
- `monkeylang.symbol_table`: `SymbolTable` with `define`,
  `define_builtin`, `define_function_name` and `resolve`, and the
  `SymbolScope` values `GLOBAL`, `LOCAL`, `BUILTIN`, `FREE` and
  `FUNCTION`. `resolve` returns `None` for an unknown name and records
  locals of enclosing tables as free symbols.
- `monkeylang.compiler`: `Compiler` turns a syntax tree into `Bytecode`
  (instructions plus a constant pool of integers, strings and
  `CompiledFunction` objects). A new compiler knows the builtins `len`,
  `puts`, `first`, `last`, `rest` and `push`; pass an existing
  `symbol_table` and `constants` list to carry state between
  compilations. Undefined variables and unknown operators raise
  `CompileError`.
- `monkeylang.evaluator`: `evaluate(node, env)` with `Environment`,
  `Function` and `Hash`, plus `type_name` and `is_truthy`. Monkey values
  are plain Python values: `int` (wrapping at 64 bits), `str`, `bool`,
  `None` for null, `list` for arrays, and `Hash` for hashes, whose keys
  must be integers, strings or booleans. Runtime errors raise
  `EvaluationError` with the language's messages, such as
  `type mismatch: INTEGER + BOOLEAN` or `identifier not found: foobar`.

## Example

Build a tree and compile it:

```python
from monkeylang.syntax import ExpressionStatement, InfixExpression, IntegerLiteral, Program
from monkeylang.compiler import Compiler
from monkeylang.bytecode import format_instructions

program = Program(statements=[
    ExpressionStatement(expression=InfixExpression(
        left=IntegerLiteral(value=1), operator="+", right=IntegerLiteral(value=2),
    )),
])

compiler = Compiler()
compiler.compile(program)
print(format_instructions(compiler.bytecode().instructions))
# 0000 OpConstant 0
# 0003 OpConstant 1
# 0006 OpAdd
# 0007 OpPop
```

Or evaluate it directly:

```python
from monkeylang.evaluator import Environment, evaluate

print(evaluate(program, Environment()))  # 3
```

## What this package does not do

- It has no lexer or parser: programs are given as syntax trees built
  from `monkeylang.syntax`, not as source text.
- It has no virtual machine: compiled `Bytecode` can be inspected and
  disassembled but not executed. Use `evaluate` to run programs.
- `MacroLiteral` is a node only; there is no macro expansion.
- There is no command-line program or interactive prompt.