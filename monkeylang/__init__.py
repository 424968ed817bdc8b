"""Syntax tree, tree rewriter, bytecode compiler and evaluator for the Monkey language."""

__version__ = "0.1.0"
__all__ = ["syntax", "modify", "bytecode", "symbol_table", "compiler", "evaluator"]