"""Tree-walking evaluator for the sim language.

Evaluation of every node produces an EvaluationResult: either a plain Value or a ReturnValue, the latter meaning a
`return` is unwinding through the enclosing blocks, loops and calls. Every construct that evaluates a child checks
for a ReturnValue and hands it straight back to its own caller, so `return` never relies on Python exceptions.
Exceptions are reserved for errors (EvaluationError), which abort the whole evaluation.

A function call does not unwrap the ReturnValue its body produces: the call's result carries the tag, and the block
holding the call stops there too. A Block whose statements all produce plain values evaluates to Unit; only a return
carries a value out of a block.

Evaluation recurses on the Python stack, so deeply recursive sim programs end in a RecursionError.
"""

import operator
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from sim.lang.error import EvaluationError
from sim.pure.grammar import (Assignment, BinaryOp, Block, Expr, FunctionCall, FunctionDef, IfExpr, Literal, Operator,
                              Return, Variable, WhileLoop)
from sim.pure.lexical import INT_MAX, INT_MIN


@dataclass(frozen=True)
class EvaluationResult:
    literal: Literal

    @property
    def returning(self):
        return isinstance(self, ReturnValue)


@dataclass(frozen=True)
class Value(EvaluationResult):
    """Normal result of an evaluation."""


@dataclass(frozen=True)
class ReturnValue(EvaluationResult):
    """A return in flight."""


UNIT = Value(Literal.UNIT)
ZERO = Value(Literal(0))

ARITHMETIC = {
    Operator.ADD: operator.add,
    Operator.SUBTRACT: operator.sub,
    Operator.MULTIPLY: operator.mul,
}

COMPARISONS = {
    Operator.LESS_THAN: operator.lt,
    Operator.GREATER_THAN: operator.gt,
    Operator.EQUAL: operator.eq,
}


@dataclass(frozen=True)
class Function:
    """Entry of the function table: parameter names and the body they are bound in."""
    params: Tuple[str, ...]
    body: Block


@dataclass
class Context:
    """Global function table plus a stack of variable scopes; the last scope is the innermost one."""
    functions: Dict[str, Function] = field(default_factory=dict)
    scopes: List[Dict[str, Literal]] = field(default_factory=lambda: [{}])

    def push_scope(self):
        self.scopes.append({})

    def pop_scope(self):
        if len(self.scopes) == 1:
            raise EvaluationError("cannot pop the top-level scope", internal=True)
        self.scopes.pop()

    def set_variable(self, name, literal):
        """Binds name in the innermost scope. Outer scopes are never written to."""
        self.scopes[-1][name] = literal

    def get_variable(self, name):
        """Looks name up from the innermost scope outwards. Returns None if it is not bound anywhere."""
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return None

    def set_function(self, name, params, body):
        self.functions[name] = Function(tuple(params), body)

    def get_function(self, name):
        return self.functions.get(name)


def check_int(value, symbol):
    """Returns value if it fits in a signed 64-bit integer, raises otherwise."""
    if not INT_MIN <= value <= INT_MAX:
        raise EvaluationError("integer overflow in '{}'", symbol)
    return value


def is_true(literal, construct):
    """Conditions must be ints; any nonzero int is true."""
    if literal.kind != "int":
        raise EvaluationError("{} condition must be an int, got {}", (construct, literal.kind))
    return literal.value != 0


def truncating_divmod(left, right):
    """Integer division truncating toward zero; the remainder takes the sign of the dividend."""
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return quotient, left - quotient * right


class Evaluator:
    """Evaluates AST nodes against a Context. One Evaluator (and Context) is used per program run or session."""

    def __init__(self, context=None):
        self.context = context if context is not None else Context()
        self._handlers = {
            FunctionDef: self.evaluate_function_def,
            FunctionCall: self.evaluate_function_call,
            IfExpr: self.evaluate_if_expr,
            WhileLoop: self.evaluate_while_loop,
            Assignment: self.evaluate_assignment,
            BinaryOp: self.evaluate_binary_op,
            Literal: self.evaluate_literal,
            Variable: self.evaluate_variable,
            Block: self.evaluate_block,
            Return: self.evaluate_return,
        }

    @property
    def handled_types(self):
        return frozenset(self._handlers)

    def evaluate(self, expr: Expr) -> EvaluationResult:
        try:
            handler = self._handlers[type(expr)]
        except KeyError:
            raise EvaluationError("cannot evaluate node of type '{}'", type(expr).__name__, internal=True)
        return handler(expr)

    def evaluate_literal(self, literal):
        return Value(literal)

    def evaluate_variable(self, variable):
        literal = self.context.get_variable(variable.name)
        if literal is None:
            raise EvaluationError("variable '{}' not found", variable.name)
        return Value(literal)

    def evaluate_assignment(self, assignment):
        result = self.evaluate(assignment.value)
        if result.returning:
            return result
        if result.literal.is_unit:
            raise EvaluationError("cannot assign unit to '{}'", assignment.name)

        self.context.set_variable(assignment.name, result.literal)
        return UNIT

    def evaluate_binary_op(self, binary_op):
        symbol = binary_op.operator.value
        left = self.evaluate(binary_op.left)
        right = self.evaluate(binary_op.right)
        if left.returning or right.returning:
            raise EvaluationError("operand of '{}' did not produce a value", symbol)
        left, right = left.literal, right.literal

        if binary_op.operator is Operator.EQUAL and left.kind == right.kind == "string":
            return Value(Literal(int(left.value == right.value)))
        if left.kind != "int" or right.kind != "int":
            raise EvaluationError("unsupported operand types for '{}': {} and {}", (symbol, left.kind, right.kind))
        left, right = left.value, right.value

        if binary_op.operator in COMPARISONS:
            return Value(Literal(int(COMPARISONS[binary_op.operator](left, right))))
        if binary_op.operator in ARITHMETIC:
            return Value(Literal(check_int(ARITHMETIC[binary_op.operator](left, right), symbol)))

        if right == 0:
            raise EvaluationError("division by zero in '{} {} {}'", (left, symbol, right))
        quotient, remainder = truncating_divmod(left, right)
        if binary_op.operator is Operator.DIVIDE:
            return Value(Literal(check_int(quotient, symbol)))
        return Value(Literal(remainder))

    def evaluate_if_expr(self, if_expr):
        condition = self.evaluate(if_expr.condition)
        if condition.returning:
            return condition

        if is_true(condition.literal, "if"):
            return self.evaluate(if_expr.consequence)
        elif if_expr.alternative is not None:
            return self.evaluate(if_expr.alternative)
        return ZERO

    def evaluate_while_loop(self, while_loop):
        while True:
            condition = self.evaluate(while_loop.condition)
            if condition.returning:
                return condition
            if not is_true(condition.literal, "while"):
                return ZERO

            result = self.evaluate(while_loop.body)
            if result.returning:
                return result

    def evaluate_block(self, block):
        for statement in block.statements:
            result = self.evaluate(statement)
            if result.returning:
                return result
        return UNIT

    def evaluate_return(self, return_):
        result = self.evaluate(return_.value)
        if result.returning:
            return result
        return ReturnValue(result.literal)

    def evaluate_function_def(self, function_def):
        self.context.set_function(function_def.name, function_def.params, function_def.body)
        return UNIT

    def evaluate_function_call(self, call):
        function = self.context.get_function(call.name)
        if function is None:
            raise EvaluationError("function '{}' not found", call.name)
        if len(call.args) != len(function.params):
            raise EvaluationError("'{}' expects {} argument(s), got {}", (call.name, len(function.params),
                                                                        len(call.args)))

        args = []
        for arg in call.args:  # evaluated in the caller's scope
            result = self.evaluate(arg)
            if result.returning:
                return result
            args.append(result.literal)

        self.context.push_scope()
        try:
            for param, literal in zip(function.params, args):
                self.context.set_variable(param, literal)
            return self.evaluate(function.body)
        finally:
            self.context.pop_scope()


def evaluate(program, context=None):
    """Evaluates program (normally the root Block) in a fresh or given Context."""
    return Evaluator(context).evaluate(program)
