"""Recursive-descent parser for the sim language: one method per grammar rule (see grammar.py), consuming a complete
token list left to right through a position cursor.

Binary operators are parsed by precedence climbing over an operator table. The default table has the usual tiers, all
left-associative:

```
*  /  %     3
+  -        2
<  >  ==    1
```

The flat table puts every operator on one tier and associates to the right, so `2 + 3 * 4` is `2 + (3 * 4)` but
`2 * 3 + 4` is `2 * (3 + 4)` and `8 - 4 - 2` is `8 - (4 - 2)`. That is how the first version of the language
parsed expressions; it is kept behind flat_operators for programs written against it.
"""

from dataclasses import dataclass

from sim.lang.error import SyntacticError
from sim.pure.grammar import (Assignment, BinaryOp, Block, FunctionCall, FunctionDef, IfExpr, Literal, Operator,
                              Return, Variable, WhileLoop)
from sim.pure.lexical import TokenType, tokenize


@dataclass(frozen=True)
class OperatorInfo:
    operator: Operator
    precedence: int
    left_associative: bool


TOKEN_OPERATORS = {
    TokenType.STAR: Operator.MULTIPLY,
    TokenType.SLASH: Operator.DIVIDE,
    TokenType.PERCENT: Operator.MODULO,
    TokenType.PLUS: Operator.ADD,
    TokenType.MINUS: Operator.SUBTRACT,
    TokenType.LESS_THAN: Operator.LESS_THAN,
    TokenType.GREATER_THAN: Operator.GREATER_THAN,
    TokenType.EQUAL: Operator.EQUAL,
}

PRECEDENCE = {
    Operator.MULTIPLY: 3,
    Operator.DIVIDE: 3,
    Operator.MODULO: 3,
    Operator.ADD: 2,
    Operator.SUBTRACT: 2,
    Operator.LESS_THAN: 1,
    Operator.GREATER_THAN: 1,
    Operator.EQUAL: 1,
}

TIERED_OPERATORS = {token_type: OperatorInfo(operator, PRECEDENCE[operator], True)
                    for token_type, operator in TOKEN_OPERATORS.items()}

FLAT_OPERATORS = {token_type: OperatorInfo(operator, 1, False) for token_type, operator in TOKEN_OPERATORS.items()}


class Parser:
    """Builds the root Block of a program from its tokens. source is only used to point error messages at the
    offending line.
    """

    def __init__(self, tokens, flat_operators=False, source=None):
        if not tokens or tokens[-1].type is not TokenType.EOF:
            raise ValueError("token list must end with an EOF token")

        self.tokens = tokens
        self.position = 0
        self.operators = FLAT_OPERATORS if flat_operators else TIERED_OPERATORS
        self.source = source

    @property
    def current_token(self):
        return self.tokens[self.position]

    def peek(self, offset=1):
        """Token offset places after the current one (the EOF token if that runs past the end)."""
        return self.tokens[min(self.position + offset, len(self.tokens) - 1)]

    def advance(self):
        """Consumes and returns the current token. The cursor never moves past EOF."""
        token = self.current_token
        if token.type is not TokenType.EOF:
            self.position += 1
        return token

    def error(self, expected, token=None):
        """Returns a SyntacticError describing what was expected vs. what token (default: current) was found."""
        if token is None:
            token = self.current_token

        msg = "expected {}, found {}"
        exprs = [expected, token.describe()]
        if self.source is None:
            return SyntacticError(msg, exprs, diagnosis=False)
        return SyntacticError.at(msg, exprs, self.source, token.start, token.end.offset - token.start.offset)

    def expect(self, token_type):
        """Consumes the current token if it is of token_type, raises SyntacticError otherwise."""
        if self.current_token.type is not token_type:
            raise self.error(token_type.describe())
        return self.advance()

    def parse(self):
        statements = []
        while self.current_token.type is not TokenType.EOF:
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
        return Block(tuple(statements))

    def parse_statement(self):
        """Dispatches on the current token (and the one after it for identifiers). Returns None for an empty
        statement.
        """
        token_type = self.current_token.type

        if token_type is TokenType.FUNCTION:
            return self.parse_function_def()
        elif token_type is TokenType.IDENTIFIER and self.peek().type is TokenType.LPAREN:
            return self.parse_function_call()
        elif token_type is TokenType.IDENTIFIER and self.peek().type is TokenType.ASSIGN:
            return self.parse_assignment()
        elif token_type is TokenType.IF:
            return self.parse_if_expr()
        elif token_type is TokenType.WHILE:
            return self.parse_while_loop()
        elif token_type is TokenType.RETURN:
            return self.parse_return()
        elif token_type is TokenType.SEMICOLON:
            self.advance()
            return None

        expression = self.parse_expression()
        if self.current_token.type is TokenType.SEMICOLON:
            self.advance()
        elif self.current_token.type not in (TokenType.RBRACE, TokenType.EOF):
            raise self.error(TokenType.SEMICOLON.describe())
        return expression

    def parse_block(self):
        self.expect(TokenType.LBRACE)
        statements = []
        while self.current_token.type is not TokenType.RBRACE:
            if self.current_token.type is TokenType.EOF:
                raise self.error(TokenType.RBRACE.describe())
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
        self.advance()
        return Block(tuple(statements))

    def parse_identifier(self):
        if self.current_token.type is not TokenType.IDENTIFIER:
            raise self.error("identifier")
        return self.advance().value

    def parse_parameters(self):
        """Parses '(' name (',' name)* ')'."""
        self.expect(TokenType.LPAREN)
        params = []
        if self.current_token.type is not TokenType.RPAREN:
            params.append(self.parse_identifier())
            while self.current_token.type is TokenType.COMMA:
                self.advance()
                params.append(self.parse_identifier())
        self.expect(TokenType.RPAREN)
        return tuple(params)

    def parse_arguments(self):
        """Parses '(' expr (',' expr)* ')'."""
        self.expect(TokenType.LPAREN)
        args = []
        if self.current_token.type is not TokenType.RPAREN:
            args.append(self.parse_expression())
            while self.current_token.type is TokenType.COMMA:
                self.advance()
                args.append(self.parse_expression())
        self.expect(TokenType.RPAREN)
        return tuple(args)

    def parse_function_def(self):
        self.expect(TokenType.FUNCTION)
        name = self.parse_identifier()
        params = self.parse_parameters()
        body = self.parse_block()
        return FunctionDef(name, params, body)

    def parse_function_call(self):
        name = self.parse_identifier()
        args = self.parse_arguments()
        self.expect(TokenType.SEMICOLON)
        return FunctionCall(name, args)

    def parse_assignment(self):
        name = self.parse_identifier()
        self.expect(TokenType.ASSIGN)
        value = self.parse_expression()
        self.expect(TokenType.SEMICOLON)
        return Assignment(name, value)

    def parse_condition(self):
        self.expect(TokenType.LPAREN)
        condition = self.parse_expression()
        self.expect(TokenType.RPAREN)
        return condition

    def parse_if_expr(self):
        self.expect(TokenType.IF)
        condition = self.parse_condition()
        consequence = self.parse_block()
        alternative = None
        if self.current_token.type is TokenType.ELSE:
            self.advance()
            alternative = self.parse_block()
        return IfExpr(condition, consequence, alternative)

    def parse_while_loop(self):
        self.expect(TokenType.WHILE)
        condition = self.parse_condition()
        body = self.parse_block()
        return WhileLoop(condition, body)

    def parse_return(self):
        self.expect(TokenType.RETURN)
        value = self.parse_expression()
        self.expect(TokenType.SEMICOLON)
        return Return(value)

    def parse_expression(self, min_precedence=1):
        left = self.parse_primary()
        while True:
            info = self.operators.get(self.current_token.type)
            if info is None or info.precedence < min_precedence:
                break
            self.advance()
            right = self.parse_expression(info.precedence + 1 if info.left_associative else info.precedence)
            left = BinaryOp(left, info.operator, right)
        return left

    def parse_primary(self):
        token = self.current_token

        if token.type in (TokenType.INTEGER, TokenType.STRING):
            self.advance()
            return Literal(token.value)
        elif token.type is TokenType.IDENTIFIER:
            self.advance()
            return Variable(token.value)
        elif token.type is TokenType.LPAREN:
            self.advance()
            expression = self.parse_expression()
            self.expect(TokenType.RPAREN)
            return expression
        raise self.error("expression")


def parse(source, flat_operators=False):
    """Tokenizes and parses source, returning the root Block."""
    return Parser(tokenize(source), flat_operators, source).parse()
