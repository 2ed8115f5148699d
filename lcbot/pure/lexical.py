r"""Tokenizer for pure lambda calculus.

Grammar at the character level:

```
<token>  ::= "(" | ")"
           | ("\" | "λ") <name> (" "* <name>)* " "* "."  ; one ParamToken per name: \x y.M = \x.\y.M
           | "let" " "* <name> " "* "="?                 ; LetToken, name inlined
           | <name>                                      ; VariableToken
<name>   ::= <alpha> <alnum>*
```

Spaces separate tokens and are otherwise ignored. Because "let" always starts a LetToken, it can't be used as an
ordinary variable name.
"""

from dataclasses import dataclass, field

from lcbot.lang.error import LexError


@dataclass(frozen=True)
class Token:
    """Superclass for all tokens. pos is the offset of the token in the input and is ignored by ==."""
    pos: int = field(default=0, compare=False)


@dataclass(frozen=True)
class LParen(Token):

    def __str__(self):
        return "("


@dataclass(frozen=True)
class RParen(Token):

    def __str__(self):
        return ")"


@dataclass(frozen=True)
class NamedToken(Token):
    name: str = ""


@dataclass(frozen=True)
class VariableToken(NamedToken):

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class ParamToken(NamedToken):
    """Abstraction parameter."""

    def __str__(self):
        return f"\\{self.name}."


@dataclass(frozen=True)
class LetToken(NamedToken):
    """'let' keyword together with the name it binds."""

    def __str__(self):
        return f"let {self.name} ="


class Lexer:
    """Single left-to-right scan with one character of lookahead."""
    LAMBDAS = ("\\", "λ")
    LET = "let"

    def __init__(self, expr):
        self.expr = expr
        self.idx = 0
        self.tokens = []

    @property
    def remaining(self):
        return len(self.expr) - self.idx

    def peek(self):
        """Returns next character, or None at end of input."""
        if self.idx < len(self.expr):
            return self.expr[self.idx]
        return None

    def error(self, msg):
        return LexError(msg, self.expr, self.remaining)

    def skip_spaces(self):
        while self.peek() is not None and self.peek().isspace():
            self.idx += 1

    def consume_name(self):
        """Consumes and returns a maximal alphanumeric run, which must start with a letter."""
        start = self.idx
        if self.peek() is None or not self.peek().isalpha() or self.peek() in Lexer.LAMBDAS:
            raise self.error("variable must be at least 1 character")

        while self.peek() is not None and self.peek().isalnum() and self.peek() not in Lexer.LAMBDAS:
            self.idx += 1
        return self.expr[start:self.idx]

    def abstraction(self):
        """Lexes an abstraction header (the lambda has already been consumed) up to and including the '.'."""
        while True:
            pos = self.idx
            name = self.consume_name()
            if name == Lexer.LET:
                raise self.error("'let' is reserved and can't be bound")
            self.tokens.append(ParamToken(pos, name))
            self.skip_spaces()

            char = self.peek()
            if char == ".":
                self.idx += 1
                return
            elif char is None:
                raise self.error("expected '.', found EOF")
            elif not char.isalpha() or char in Lexer.LAMBDAS:
                raise self.error(f"expected '.', found '{char}'")

    def name(self):
        pos = self.idx
        name = self.consume_name()
        if name != Lexer.LET:
            self.tokens.append(VariableToken(pos, name))
            return

        self.skip_spaces()
        self.tokens.append(LetToken(pos, self.consume_name()))
        self.skip_spaces()
        if self.peek() == "=":
            self.idx += 1

    def tokenize(self):
        """Returns list of tokens in self.expr. Raises LexError on the first character that can't be lexed."""
        while self.peek() is not None:
            char = self.peek()
            if char.isspace():
                self.idx += 1
            elif char == "(":
                self.tokens.append(LParen(self.idx))
                self.idx += 1
            elif char == ")":
                self.tokens.append(RParen(self.idx))
                self.idx += 1
            elif char in Lexer.LAMBDAS:
                self.idx += 1
                self.abstraction()
            elif char.isalpha():
                self.name()
            else:
                raise self.error(f"invalid char: '{char}'")
        return self.tokens


def tokenize(expr):
    """Converts expr into a list of Tokens. Raises LexError."""
    return Lexer(expr).tokenize()
