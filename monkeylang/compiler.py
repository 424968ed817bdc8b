"""Compilation of syntax trees into bytecode."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .bytecode import Opcode, make
from .symbol_table import Symbol, SymbolScope, SymbolTable
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

BUILTIN_NAMES = ("len", "puts", "first", "last", "rest", "push")

_INFIX_OPCODES = {
    "+": Opcode.ADD,
    "-": Opcode.SUB,
    "*": Opcode.MUL,
    "/": Opcode.DIV,
    ">": Opcode.GREATER_THAN,
    "==": Opcode.EQUAL,
    "!=": Opcode.NOT_EQUAL,
}

_PREFIX_OPCODES = {
    "!": Opcode.BANG,
    "-": Opcode.MINUS,
}

_PLACEHOLDER_OFFSET = 9999


class CompileError(Exception):
    """Raised when a syntax tree cannot be compiled."""


@dataclass
class CompiledFunction:
    instructions: bytes
    num_locals: int = 0
    num_parameters: int = 0

    def __str__(self) -> str:
        return f"CompiledFunction[{id(self):#x}]"


@dataclass
class Bytecode:
    instructions: bytes
    constants: list[Any]


@dataclass
class EmittedInstruction:
    opcode: Opcode | None = None
    position: int = 0


@dataclass
class CompilationScope:
    instructions: bytearray = field(default_factory=bytearray)
    last_instruction: EmittedInstruction = field(default_factory=EmittedInstruction)
    previous_instruction: EmittedInstruction = field(default_factory=EmittedInstruction)


class Compiler:
    """Turns a syntax tree into instructions and a constant pool."""

    def __init__(
        self,
        symbol_table: SymbolTable | None = None,
        constants: list[Any] | None = None,
    ) -> None:
        if symbol_table is None:
            symbol_table = SymbolTable()
            for index, name in enumerate(BUILTIN_NAMES):
                symbol_table.define_builtin(index, name)
        self.symbol_table = symbol_table
        self.constants = constants if constants is not None else []
        self.scopes: list[CompilationScope] = [CompilationScope()]

    @property
    def scope_index(self) -> int:
        return len(self.scopes) - 1

    @property
    def _scope(self) -> CompilationScope:
        return self.scopes[-1]

    def compile(self, node: Node | None) -> None:
        """Compile ``node``; raise CompileError on an unknown name or operator."""
        if isinstance(node, (Program, BlockStatement)):
            for statement in node.statements:
                self.compile(statement)

        elif isinstance(node, ExpressionStatement):
            self.compile(node.expression)
            self.emit(Opcode.POP)

        elif isinstance(node, InfixExpression):
            if node.operator == "<":
                self.compile(node.right)
                self.compile(node.left)
                self.emit(Opcode.GREATER_THAN)
                return
            self.compile(node.left)
            self.compile(node.right)
            opcode = _INFIX_OPCODES.get(node.operator)
            if opcode is None:
                raise CompileError(f"unknown operator {node.operator}")
            self.emit(opcode)

        elif isinstance(node, IntegerLiteral):
            self.emit(Opcode.CONSTANT, self._add_constant(node.value))

        elif isinstance(node, StringLiteral):
            self.emit(Opcode.CONSTANT, self._add_constant(node.value))

        elif isinstance(node, Boolean):
            self.emit(Opcode.TRUE if node.value else Opcode.FALSE)

        elif isinstance(node, PrefixExpression):
            self.compile(node.right)
            opcode = _PREFIX_OPCODES.get(node.operator)
            if opcode is None:
                raise CompileError(f"unknown operator {node.operator}")
            self.emit(opcode)

        elif isinstance(node, IfExpression):
            self._compile_if(node)

        elif isinstance(node, LetStatement):
            symbol = self.symbol_table.define(node.name.value)
            self.compile(node.value)
            if symbol.scope is SymbolScope.GLOBAL:
                self.emit(Opcode.SET_GLOBAL, symbol.index)
            else:
                self.emit(Opcode.SET_LOCAL, symbol.index)

        elif isinstance(node, Identifier):
            symbol = self.symbol_table.resolve(node.value)
            if symbol is None:
                raise CompileError(f"undefined variable {node.value}")
            self._load_symbol(symbol)

        elif isinstance(node, ArrayLiteral):
            for element in node.elements:
                self.compile(element)
            self.emit(Opcode.ARRAY, len(node.elements))

        elif isinstance(node, HashLiteral):
            for key, value in sorted(node.pairs, key=lambda pair: str(pair[0])):
                self.compile(key)
                self.compile(value)
            self.emit(Opcode.HASH, len(node.pairs) * 2)

        elif isinstance(node, IndexExpression):
            self.compile(node.left)
            self.compile(node.index)
            self.emit(Opcode.INDEX)

        elif isinstance(node, FunctionLiteral):
            self._compile_function(node)

        elif isinstance(node, ReturnStatement):
            self.compile(node.return_value)
            self.emit(Opcode.RETURN_VALUE)

        elif isinstance(node, CallExpression):
            self.compile(node.function)
            for argument in node.arguments:
                self.compile(argument)
            self.emit(Opcode.CALL, len(node.arguments))

    def _compile_if(self, node: IfExpression) -> None:
        self.compile(node.condition)
        jump_not_truthy = self.emit(Opcode.JUMP_NOT_TRUTHY, _PLACEHOLDER_OFFSET)

        self.compile(node.consequence)
        if self._last_instruction_is(Opcode.POP):
            self._remove_last_pop()

        jump = self.emit(Opcode.JUMP, _PLACEHOLDER_OFFSET)
        self._change_operand(jump_not_truthy, len(self._scope.instructions))

        if node.alternative is None:
            self.emit(Opcode.NULL)
        else:
            self.compile(node.alternative)
            if self._last_instruction_is(Opcode.POP):
                self._remove_last_pop()

        self._change_operand(jump, len(self._scope.instructions))

    def _compile_function(self, node: FunctionLiteral) -> None:
        self.enter_scope()
        if node.name:
            self.symbol_table.define_function_name(node.name)
        for parameter in node.parameters:
            self.symbol_table.define(parameter.value)

        self.compile(node.body)

        if self._last_instruction_is(Opcode.POP):
            self._replace_last_pop_with_return()
        if not self._last_instruction_is(Opcode.RETURN_VALUE):
            self.emit(Opcode.RETURN)

        free_symbols = list(self.symbol_table.free_symbols)
        num_locals = self.symbol_table.num_definitions
        instructions = self.leave_scope()

        for symbol in free_symbols:
            self._load_symbol(symbol)

        function = CompiledFunction(
            instructions=instructions,
            num_locals=num_locals,
            num_parameters=len(node.parameters),
        )
        self.emit(Opcode.CLOSURE, self._add_constant(function), len(free_symbols))

    def bytecode(self) -> Bytecode:
        return Bytecode(bytes(self._scope.instructions), self.constants)

    def emit(self, op: Opcode, *args: int) -> int:
        """Append one instruction to the current scope; return its position."""
        scope = self._scope
        position = len(scope.instructions)
        scope.instructions += make(op, *args)
        scope.previous_instruction = scope.last_instruction
        scope.last_instruction = EmittedInstruction(op, position)
        return position

    def enter_scope(self) -> None:
        self.scopes.append(CompilationScope())
        self.symbol_table = SymbolTable(self.symbol_table)

    def leave_scope(self) -> bytes:
        """Drop the current scope and return the instructions it held."""
        scope = self.scopes.pop()
        self.symbol_table = self.symbol_table.outer
        return bytes(scope.instructions)

    def _add_constant(self, value: Any) -> int:
        self.constants.append(value)
        return len(self.constants) - 1

    def _last_instruction_is(self, op: Opcode) -> bool:
        scope = self._scope
        return bool(scope.instructions) and scope.last_instruction.opcode == op

    def _remove_last_pop(self) -> None:
        scope = self._scope
        del scope.instructions[scope.last_instruction.position :]
        scope.last_instruction = scope.previous_instruction

    def _replace_instruction(self, position: int, instruction: bytes) -> None:
        self._scope.instructions[position : position + len(instruction)] = instruction

    def _change_operand(self, position: int, operand: int) -> None:
        op = Opcode(self._scope.instructions[position])
        self._replace_instruction(position, make(op, operand))

    def _replace_last_pop_with_return(self) -> None:
        last = self._scope.last_instruction
        self._replace_instruction(last.position, make(Opcode.RETURN_VALUE))
        last.opcode = Opcode.RETURN_VALUE

    def _load_symbol(self, symbol: Symbol) -> None:
        if symbol.scope is SymbolScope.GLOBAL:
            self.emit(Opcode.GET_GLOBAL, symbol.index)
        elif symbol.scope is SymbolScope.LOCAL:
            self.emit(Opcode.GET_LOCAL, symbol.index)
        elif symbol.scope is SymbolScope.BUILTIN:
            self.emit(Opcode.GET_BUILTIN, symbol.index)
        elif symbol.scope is SymbolScope.FREE:
            self.emit(Opcode.GET_FREE, symbol.index)
        elif symbol.scope is SymbolScope.FUNCTION:
            self.emit(Opcode.CURRENT_CLOSURE)