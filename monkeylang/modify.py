"""Rewriting of syntax trees bottom-up."""

from __future__ import annotations

from collections.abc import Callable

from .syntax import (
    ArrayLiteral,
    BlockStatement,
    ExpressionStatement,
    FunctionLiteral,
    HashLiteral,
    IfExpression,
    IndexExpression,
    InfixExpression,
    LetStatement,
    Node,
    PrefixExpression,
    Program,
    ReturnStatement,
)

Modifier = Callable[[Node], Node]


def modify(node: Node, modifier: Modifier) -> Node:
    """Apply ``modifier`` to every node below ``node``, children first."""

    def visit(child):
        return None if child is None else modify(child, modifier)

    if isinstance(node, (Program, BlockStatement)):
        node.statements[:] = [visit(s) for s in node.statements]
    elif isinstance(node, ExpressionStatement):
        node.expression = visit(node.expression)
    elif isinstance(node, InfixExpression):
        node.left = visit(node.left)
        node.right = visit(node.right)
    elif isinstance(node, PrefixExpression):
        node.right = visit(node.right)
    elif isinstance(node, IndexExpression):
        node.left = visit(node.left)
        node.index = visit(node.index)
    elif isinstance(node, IfExpression):
        node.condition = visit(node.condition)
        node.consequence = visit(node.consequence)
        node.alternative = visit(node.alternative)
    elif isinstance(node, FunctionLiteral):
        node.parameters[:] = [visit(p) for p in node.parameters]
        node.body = visit(node.body)
    elif isinstance(node, ReturnStatement):
        node.return_value = visit(node.return_value)
    elif isinstance(node, LetStatement):
        node.value = visit(node.value)
    elif isinstance(node, ArrayLiteral):
        node.elements[:] = [visit(e) for e in node.elements]
    elif isinstance(node, HashLiteral):
        node.pairs = [(visit(k), visit(v)) for k, v in node.pairs]

    return modifier(node)