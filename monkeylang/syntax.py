"""Syntax tree nodes for the Monkey language."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class Node(ABC):
    """Base of every syntax tree node."""

    token: str | None

    def __post_init__(self) -> None:
        if self.token is None:
            self.token = self._default_token()

    def _default_token(self) -> str:
        return ""

    def token_literal(self) -> str:
        """The literal text of the token this node starts with."""
        return self.token or ""

    @abstractmethod
    def __str__(self) -> str:
        """Source-like rendering of the node."""


class Statement(Node):
    """A node that stands as a statement."""


class Expression(Node):
    """A node that produces a value."""


@dataclass
class Program(Node):
    statements: list[Statement] = field(default_factory=list)
    token: str | None = field(default=None, compare=False)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return "".join(str(statement) for statement in self.statements)


@dataclass
class Identifier(Expression):
    value: str = ""
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass
class LetStatement(Statement):
    name: Identifier | None = None
    value: Expression | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "let"

    def __str__(self) -> str:
        name = str(self.name) if self.name is not None else ""
        value = str(self.value) if self.value is not None else ""
        return f"{self.token_literal()} {name} = {value};"


@dataclass
class ReturnStatement(Statement):
    return_value: Expression | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "return"

    def __str__(self) -> str:
        value = str(self.return_value) if self.return_value is not None else ""
        return f"{self.token_literal()} {value};"


@dataclass
class ExpressionStatement(Statement):
    expression: Expression | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return self.expression.token_literal() if self.expression is not None else ""

    def __str__(self) -> str:
        return str(self.expression) if self.expression is not None else ""


@dataclass
class BlockStatement(Statement):
    statements: list[Statement] = field(default_factory=list)
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "{"

    def __str__(self) -> str:
        return "".join(str(statement) for statement in self.statements)


@dataclass
class Boolean(Expression):
    value: bool = False
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "true" if self.value else "false"

    def __str__(self) -> str:
        return self.token_literal()


@dataclass
class IntegerLiteral(Expression):
    value: int = 0
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return str(self.value)

    def __str__(self) -> str:
        return self.token_literal()


@dataclass
class StringLiteral(Expression):
    value: str = ""
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.token_literal()


@dataclass
class PrefixExpression(Expression):
    operator: str = ""
    right: Expression | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return self.operator

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass
class InfixExpression(Expression):
    left: Expression | None = None
    operator: str = ""
    right: Expression | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return self.operator

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class IfExpression(Expression):
    condition: Expression | None = None
    consequence: BlockStatement | None = None
    alternative: BlockStatement | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "if"

    def __str__(self) -> str:
        text = f"if{self.condition} {self.consequence}"
        if self.alternative is not None:
            text += f"else {self.alternative}"
        return text


@dataclass
class FunctionLiteral(Expression):
    parameters: list[Identifier] = field(default_factory=list)
    body: BlockStatement | None = None
    name: str = ""
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "fn"

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        label = f"<{self.name}>" if self.name else ""
        return f"{self.token_literal()}{label}({params}) {self.body}"


@dataclass
class CallExpression(Expression):
    function: Expression | None = None
    arguments: list[Expression] = field(default_factory=list)
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "("

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


@dataclass
class ArrayLiteral(Expression):
    elements: list[Expression] = field(default_factory=list)
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "["

    def __str__(self) -> str:
        return "[" + ", ".join(str(e) for e in self.elements) + "]"


@dataclass
class IndexExpression(Expression):
    left: Expression | None = None
    index: Expression | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "["

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


@dataclass
class HashLiteral(Expression):
    """A hash literal; pairs keep the order in which they were written."""

    pairs: list[tuple[Expression, Expression]] = field(default_factory=list)
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "{"

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}:{v}" for k, v in self.pairs) + "}"


@dataclass
class MacroLiteral(Expression):
    parameters: list[Identifier] = field(default_factory=list)
    body: BlockStatement | None = None
    token: str | None = field(default=None, compare=False)

    def _default_token(self) -> str:
        return "macro"

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {self.body}"