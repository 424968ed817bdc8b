"""Tree-walking evaluation of Monkey programs."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .syntax import (
    ArrayLiteral,
    BlockStatement,
    Boolean,
    CallExpression,
    ExpressionStatement,
    FunctionLiteral,
    HashLiteral,
    Identifier,
    IfExpression,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    Node,
    PrefixExpression,
    Program,
    ReturnStatement,
    StringLiteral,
)

_INT_MIN = -(1 << 63)
_INT_SPAN = 1 << 64
_HASHABLE_TYPES = ("INTEGER", "STRING", "BOOLEAN")


def _wrap(value: int) -> int:
    """Keep an integer inside the signed 64-bit range, wrapping on overflow."""
    return (value - _INT_MIN) % _INT_SPAN + _INT_MIN


class EvaluationError(Exception):
    """A runtime error raised by a Monkey program."""


class _ReturnSignal(Exception):
    def __init__(self, value: Any) -> None:
        super().__init__()
        self.value = value


class Environment:
    """Variable bindings, optionally enclosed by an outer environment."""

    def __init__(self, outer: Environment | None = None) -> None:
        self.outer = outer
        self._store: dict[str, Any] = {}

    def get(self, name: str) -> Any:
        """Look ``name`` up here and outward; raise KeyError if unbound."""
        env: Environment | None = self
        while env is not None:
            if name in env._store:
                return env._store[name]
            env = env.outer
        raise KeyError(name)

    def set(self, name: str, value: Any) -> Any:
        self._store[name] = value
        return value


@dataclass(eq=False)
class Function:
    """A user-defined function together with the environment it closes over."""

    parameters: list[Identifier]
    body: BlockStatement
    env: Environment

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {{\n{self.body}\n}}"


@dataclass(frozen=True, eq=False)
class _Builtin:
    name: str
    fn: Callable[..., Any]

    def __str__(self) -> str:
        return "builtin function"


def _hash_key(value: Any) -> tuple[str, Any]:
    name = type_name(value)
    if name not in _HASHABLE_TYPES:
        raise EvaluationError(f"unusable as hash key: {name}")
    return name, value


class Hash:
    """A Monkey hash; keys are integers, strings or booleans."""

    def __init__(self, pairs: Iterable[tuple[Any, Any]] | Mapping[Any, Any] = ()) -> None:
        if isinstance(pairs, Mapping):
            pairs = pairs.items()
        self._pairs: dict[tuple[str, Any], tuple[Any, Any]] = {}
        for key, value in pairs:
            self._pairs[_hash_key(key)] = (key, value)

    def get(self, key: Any) -> Any:
        """Value stored under ``key``, or None; raise for unhashable keys."""
        pair = self._pairs.get(_hash_key(key))
        return None if pair is None else pair[1]

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[Any]:
        return (key for key, _ in self._pairs.values())

    def __str__(self) -> str:
        items = ", ".join(f"{_inspect(k)}: {_inspect(v)}" for k, v in self._pairs.values())
        return "{" + items + "}"


def type_name(value: Any) -> str:
    """The Monkey type name of a runtime value."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "BOOLEAN"
    if isinstance(value, int):
        return "INTEGER"
    if isinstance(value, str):
        return "STRING"
    if isinstance(value, list):
        return "ARRAY"
    if isinstance(value, Hash):
        return "HASH"
    if isinstance(value, Function):
        return "FUNCTION"
    if isinstance(value, _Builtin):
        return "BUILTIN"
    raise TypeError(f"not a Monkey value: {value!r}")


def is_truthy(value: Any) -> bool:
    """Only null and false are falsy."""
    return value is not None and value is not False


def _inspect(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(_inspect(v) for v in value) + "]"
    return str(value)


def _check_count(args: tuple[Any, ...], want: int) -> None:
    if len(args) != want:
        raise EvaluationError(f"wrong number of arguments. got={len(args)}, want={want}")


def _require_array(name: str, value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise EvaluationError(f"argument to `{name}` must be ARRAY, got {type_name(value)}")
    return value


def _builtin_len(*args: Any) -> int:
    _check_count(args, 1)
    arg = args[0]
    if isinstance(arg, str):
        return len(arg.encode("utf-8"))
    if isinstance(arg, list):
        return len(arg)
    raise EvaluationError(f"argument to `len` not supported, got {type_name(arg)}")


def _builtin_puts(*args: Any) -> None:
    for arg in args:
        print(_inspect(arg))
    return None


def _builtin_first(*args: Any) -> Any:
    _check_count(args, 1)
    array = _require_array("first", args[0])
    return array[0] if array else None


def _builtin_last(*args: Any) -> Any:
    _check_count(args, 1)
    array = _require_array("last", args[0])
    return array[-1] if array else None


def _builtin_rest(*args: Any) -> Any:
    _check_count(args, 1)
    array = _require_array("rest", args[0])
    return array[1:] if array else None


def _builtin_push(*args: Any) -> list[Any]:
    _check_count(args, 2)
    array = _require_array("push", args[0])
    return [*array, args[1]]


_BUILTINS: dict[str, _Builtin] = {
    name: _Builtin(name, fn)
    for name, fn in (
        ("len", _builtin_len),
        ("puts", _builtin_puts),
        ("first", _builtin_first),
        ("last", _builtin_last),
        ("rest", _builtin_rest),
        ("push", _builtin_push),
    )
}


def evaluate(node: Node | None, env: Environment) -> Any:
    """Evaluate ``node`` in ``env``; raise EvaluationError on runtime errors."""
    try:
        return _eval(node, env)
    except _ReturnSignal as signal:
        return signal.value


def _eval(node: Node | None, env: Environment) -> Any:
    if isinstance(node, (Program, BlockStatement)):
        result = None
        for statement in node.statements:
            result = _eval(statement, env)
        return result
    if isinstance(node, ExpressionStatement):
        return _eval(node.expression, env)
    if isinstance(node, ReturnStatement):
        raise _ReturnSignal(_eval(node.return_value, env))
    if isinstance(node, LetStatement):
        env.set(node.name.value, _eval(node.value, env))
        return None
    if isinstance(node, Boolean):
        return bool(node.value)
    if isinstance(node, IntegerLiteral):
        return node.value
    if isinstance(node, StringLiteral):
        return node.value
    if isinstance(node, PrefixExpression):
        return _eval_prefix(node.operator, _eval(node.right, env))
    if isinstance(node, InfixExpression):
        left = _eval(node.left, env)
        right = _eval(node.right, env)
        return _eval_infix(node.operator, left, right)
    if isinstance(node, IfExpression):
        if is_truthy(_eval(node.condition, env)):
            return _eval(node.consequence, env)
        if node.alternative is not None:
            return _eval(node.alternative, env)
        return None
    if isinstance(node, Identifier):
        return _eval_identifier(node, env)
    if isinstance(node, FunctionLiteral):
        return Function(node.parameters, node.body, env)
    if isinstance(node, CallExpression):
        function = _eval(node.function, env)
        args = [_eval(argument, env) for argument in node.arguments]
        return _apply(function, args)
    if isinstance(node, ArrayLiteral):
        return [_eval(element, env) for element in node.elements]
    if isinstance(node, IndexExpression):
        left = _eval(node.left, env)
        index = _eval(node.index, env)
        return _eval_index(left, index)
    if isinstance(node, HashLiteral):
        pairs = []
        for key_node, value_node in node.pairs:
            key = _eval(key_node, env)
            _hash_key(key)
            pairs.append((key, _eval(value_node, env)))
        return Hash(pairs)
    return None


def _eval_identifier(node: Identifier, env: Environment) -> Any:
    try:
        return env.get(node.value)
    except KeyError:
        pass
    builtin = _BUILTINS.get(node.value)
    if builtin is not None:
        return builtin
    raise EvaluationError(f"identifier not found: {node.value}")


def _eval_prefix(operator: str, right: Any) -> Any:
    if operator == "!":
        return not is_truthy(right)
    if operator == "-":
        if type_name(right) != "INTEGER":
            raise EvaluationError(f"unknown operator: -{type_name(right)}")
        return _wrap(-right)
    raise EvaluationError(f"unknown operator: {operator}{type_name(right)}")


def _same(left: Any, right: Any) -> bool:
    if type_name(left) != type_name(right):
        return False
    if left is None or isinstance(left, bool):
        return left == right
    return left is right


def _eval_infix(operator: str, left: Any, right: Any) -> Any:
    left_type, right_type = type_name(left), type_name(right)
    if left_type == right_type == "INTEGER":
        return _eval_integer_infix(operator, left, right)
    if left_type == right_type == "STRING":
        if operator != "+":
            raise EvaluationError(f"unknown operator: {left_type} {operator} {right_type}")
        return left + right
    if operator == "==":
        return _same(left, right)
    if operator == "!=":
        return not _same(left, right)
    if left_type != right_type:
        raise EvaluationError(f"type mismatch: {left_type} {operator} {right_type}")
    raise EvaluationError(f"unknown operator: {left_type} {operator} {right_type}")


def _eval_integer_infix(operator: str, left: int, right: int) -> Any:
    if operator == "+":
        return _wrap(left + right)
    if operator == "-":
        return _wrap(left - right)
    if operator == "*":
        return _wrap(left * right)
    if operator == "/":
        if right == 0:
            raise EvaluationError("division by zero")
        quotient = abs(left) // abs(right)
        return _wrap(-quotient if (left < 0) != (right < 0) else quotient)
    if operator == "<":
        return left < right
    if operator == ">":
        return left > right
    if operator == "==":
        return left == right
    if operator == "!=":
        return left != right
    raise EvaluationError(f"unknown operator: INTEGER {operator} INTEGER")


def _apply(function: Any, args: list[Any]) -> Any:
    if isinstance(function, Function):
        if len(args) < len(function.parameters):
            raise EvaluationError(
                f"wrong number of arguments. got={len(args)}, want={len(function.parameters)}"
            )
        env = Environment(function.env)
        for parameter, argument in zip(function.parameters, args):
            env.set(parameter.value, argument)
        return evaluate(function.body, env)
    if isinstance(function, _Builtin):
        return function.fn(*args)
    raise EvaluationError(f"not a function: {type_name(function)}")


def _eval_index(left: Any, index: Any) -> Any:
    if isinstance(left, list) and type_name(index) == "INTEGER":
        return left[index] if 0 <= index < len(left) else None
    if isinstance(left, Hash):
        return left.get(index)
    raise EvaluationError(f"index operator not supported: {type_name(left)}")