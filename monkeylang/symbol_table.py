"""Lexical scopes of names for the bytecode compiler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SymbolScope(str, Enum):
    LOCAL = "LOCAL"
    GLOBAL = "GLOBAL"
    BUILTIN = "BUILTIN"
    FREE = "FREE"
    FUNCTION = "FUNCTION"


@dataclass(frozen=True)
class Symbol:
    name: str
    scope: SymbolScope
    index: int


class SymbolTable:
    """Maps names to symbols; enclosed tables resolve through their outer one."""

    def __init__(self, outer: SymbolTable | None = None) -> None:
        self.outer = outer
        self.free_symbols: list[Symbol] = []
        self.num_definitions = 0
        self._store: dict[str, Symbol] = {}

    def define(self, name: str) -> Symbol:
        """Bind ``name`` to the next slot of this table."""
        scope = SymbolScope.GLOBAL if self.outer is None else SymbolScope.LOCAL
        symbol = Symbol(name, scope, self.num_definitions)
        self._store[name] = symbol
        self.num_definitions += 1
        return symbol

    def define_builtin(self, index: int, name: str) -> Symbol:
        symbol = Symbol(name, SymbolScope.BUILTIN, index)
        self._store[name] = symbol
        return symbol

    def define_function_name(self, name: str) -> Symbol:
        symbol = Symbol(name, SymbolScope.FUNCTION, 0)
        self._store[name] = symbol
        return symbol

    def resolve(self, name: str) -> Symbol | None:
        """Find ``name`` here or outside; return None when it is not bound.

        Locals of enclosing functions become free symbols of this table.
        """
        symbol = self._store.get(name)
        if symbol is not None or self.outer is None:
            return symbol
        symbol = self.outer.resolve(name)
        if symbol is None or symbol.scope in (SymbolScope.GLOBAL, SymbolScope.BUILTIN):
            return symbol
        return self._define_free(symbol)

    def _define_free(self, original: Symbol) -> Symbol:
        self.free_symbols.append(original)
        symbol = Symbol(original.name, SymbolScope.FREE, len(self.free_symbols) - 1)
        self._store[original.name] = symbol
        return symbol