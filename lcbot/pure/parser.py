r"""Recursive-descent parser for pure lambda calculus statements.

```
<statement>  ::= LetToken <expression> | <expression>
<expression> ::= (<term> | ParamToken <expression>)*   ; application associates left, abstraction bodies are greedy
<term>       ::= "(" <expression> ")" | VariableToken
```

A ParamToken swallows the rest of the enclosing expression as its body, so `\x y.x y` (which lexes as two
ParamTokens) parses as `\x.\y.x y` and `a \x.x b` as `a (\x.x b)`.
"""

from dataclasses import dataclass

from lcbot.lang.error import ErrorHandler, GenericException, ParseError
from lcbot.pure.lexical import LetToken, LParen, ParamToken, RParen, VariableToken, tokenize
from lcbot.pure.term import Abstraction, Application, LambdaTerm, Variable


@dataclass(frozen=True)
class Expr:
    """Bare expression statement."""
    expr: LambdaTerm

    def __str__(self):
        return str(self.expr)


@dataclass(frozen=True)
class Let:
    """let NAME = expr statement."""
    name: str
    expr: LambdaTerm

    def __str__(self):
        return f"let {self.name} = {self.expr}"


class Parser:
    """Turns a line of text into a statement. The cursor is reset by every parse call."""

    def __init__(self, error_handler=None):
        self.error_handler = error_handler if error_handler is not None else ErrorHandler(fatal=False)
        self.expr = ""
        self.tokens = []
        self.cur = 0
        self.len = 0

    def parse(self, expr):
        """Returns Let or Expr statement parsed from expr. If expr can't be parsed, reports the error through
        self.error_handler and returns None.
        """
        try:
            return self.parse_or_raise(expr)
        except GenericException as error:
            self.error_handler.throw(error)
            return None

    def parse_or_raise(self, expr):
        """Like parse, but raises a LexError/ParseError instead of reporting it."""
        self.expr = expr
        self.tokens = tokenize(expr)
        self.cur = 0
        self.len = len(self.tokens)

        stmt = self.read_statement()
        if self.cur < self.len:
            # an unmatched ")" ends the top-level expression, the rest of the line is dropped
            start = self.tokens[self.cur].pos
            self.error_handler.warn("'{}' has unmatched ')', ignoring the rest", expr, start=start)
        return stmt

    def peek(self):
        """Returns current token, or None if all tokens have been consumed."""
        if self.cur < self.len:
            return self.tokens[self.cur]
        return None

    def take(self):
        token = self.tokens[self.cur]
        self.cur += 1
        return token

    def error(self, msg, start=None):
        """ParseError pointing at start, or at end of input if start is None."""
        if start is None:
            start = len(self.expr)
        return ParseError(msg, self.expr, start=start, end=start + 1)

    def read_statement(self):
        token = self.peek()
        if isinstance(token, LetToken):
            self.take()
            return Let(token.name, self.read_expression())
        return Expr(self.read_expression())

    def read_expression(self):
        """Reads applications up to end of input or the next unmatched ")". Raises ParseError if there is nothing to
        read.
        """
        left = None
        while self.peek() is not None and not isinstance(self.peek(), RParen):
            token = self.peek()
            if isinstance(token, ParamToken):
                self.take()
                if self.peek() is None or isinstance(self.peek(), RParen):
                    raise self.error("'{}' has an abstraction with an empty body", self._pos())
                right = Abstraction(token.name, self.read_expression())
            else:
                right = self.read_term()

            left = right if left is None else Application(left, right)

        if left is None:
            raise self.error("'{}' is missing a λ-term", self._pos())
        return left

    def read_term(self):
        token = self.take()
        if isinstance(token, VariableToken):
            return Variable(token.name)

        elif isinstance(token, LParen):
            if isinstance(self.peek(), RParen):
                raise self.error("'{}' has empty parentheses", token.pos)

            expr = self.read_expression()
            if not isinstance(self.peek(), RParen):
                raise self.error("'{}' has unterminated '('")
            self.take()
            return expr

        raise self.error("'let' must start the statement in '{}'", token.pos)

    def _pos(self):
        token = self.peek()
        return token.pos if token is not None else None


def parse(expr, error_handler=None):
    """Parses expr with a fresh Parser. Returns None (after reporting the error) if expr is malformed."""
    return Parser(error_handler).parse(expr)
