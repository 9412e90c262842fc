"""Abstract syntax tree of the sim language.

Every node is an immutable Expr; children are owned by exactly one parent, so the tree is acyclic and has no back
references. Formally:

```
<program>   ::= <statement>*                                   ; parsed into a Block
<statement> ::= "function" <name> "(" <names>? ")" <block>      ; FunctionDef
              | <name> "(" <exprs>? ")" ";"                     ; FunctionCall
              | <name> "=" <expr> ";"                           ; Assignment
              | "if" "(" <expr> ")" <block> ("else" <block>)?   ; IfExpr
              | "while" "(" <expr> ")" <block>                  ; WhileLoop
              | "return" <expr> ";"                             ; Return
              | ";"                                             ; empty, dropped by the parser
              | <expr> ";"
<block>     ::= "{" <statement>* "}"                            ; Block
<expr>      ::= <primary> (<operator> <primary>)*               ; BinaryOp, see parser.py for precedence
<primary>   ::= <integer> | <string> | <name> | "(" <expr> ")"  ; Literal, Variable
```
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class Operator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    EQUAL = "=="


class Expr(ABC):
    """Superclass of every AST node."""


@dataclass(frozen=True)
class Literal(Expr):
    """Int (python int), String (python str) or Unit (None)."""
    value: Union[int, str, None] = None

    UNIT: ClassVar["Literal"]

    @property
    def is_unit(self):
        return self.value is None

    @property
    def kind(self):
        if self.value is None:
            return "unit"
        return "int" if isinstance(self.value, int) else "string"

    def __str__(self):
        if self.value is None:
            return "()"
        if isinstance(self.value, str):
            return f'"{self.value}"'
        return str(self.value)


Literal.UNIT = Literal()


@dataclass(frozen=True)
class Variable(Expr):
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class BinaryOp(Expr):
    left: Expr
    operator: Operator
    right: Expr

    def __str__(self):
        return f"({self.left} {self.operator.value} {self.right})"


@dataclass(frozen=True)
class Assignment(Expr):
    name: str
    value: Expr

    def __str__(self):
        return f"{self.name} = {self.value};"


@dataclass(frozen=True)
class Block(Expr):
    """Ordered statements. Evaluates to Unit unless a return unwinds through it."""
    statements: Tuple[Expr, ...] = ()

    def __str__(self):
        if not self.statements:
            return "{}"
        return "{ " + " ".join(str(statement) for statement in self.statements) + " }"


@dataclass(frozen=True)
class IfExpr(Expr):
    condition: Expr
    consequence: Block
    alternative: Optional[Block] = None

    def __str__(self):
        text = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            text += f" else {self.alternative}"
        return text


@dataclass(frozen=True)
class WhileLoop(Expr):
    condition: Expr
    body: Block

    def __str__(self):
        return f"while ({self.condition}) {self.body}"


@dataclass(frozen=True)
class FunctionDef(Expr):
    name: str
    params: Tuple[str, ...]
    body: Block

    def __str__(self):
        return f"function {self.name}({', '.join(self.params)}) {self.body}"


@dataclass(frozen=True)
class FunctionCall(Expr):
    name: str
    args: Tuple[Expr, ...] = ()

    def __str__(self):
        return f"{self.name}({', '.join(str(arg) for arg in self.args)});"


@dataclass(frozen=True)
class Return(Expr):
    value: Expr

    def __str__(self):
        return f"return {self.value};"
