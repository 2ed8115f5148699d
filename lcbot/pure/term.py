r"""Pure lambda calculus abstract syntax tree.

```
<λ-term> ::= <name>                   ; Variable
           | "\" <name> "." <λ-term>  ; Abstraction, body extends as far right as possible
           | <λ-term> <λ-term>        ; Application, associating by left: a b c d = ((a b) c) d
```

Terms are never mutated after construction: substitution and reduction always build new nodes, so subtrees may be
shared freely between terms. Equality is structural, not alpha-equivalence: `\x.x != \y.y`.

Sources: https://plato.stanford.edu/entries/lambda-calculus/#Com,
         http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

from abc import ABC, abstractmethod
from itertools import count


class LambdaTerm(ABC):
    """Represents a λ-term: variable, abstraction, or application."""
    FRESH_PREFIX = "v"

    @property
    @abstractmethod
    def nodes(self):
        """Child nodes, left to right. Abstractions report their parameter as a Variable."""

    @abstractmethod
    def occurs_free(self, var):
        """Whether or not var has an occurrence in self that no enclosing abstraction binds."""

    @abstractmethod
    def sub(self, var, new_term):
        """Capture-avoiding substitution: returns self with every free occurrence of var replaced by new_term."""

    @abstractmethod
    def has_redex(self):
        """Whether or not self contains an application whose function is an abstraction."""

    @abstractmethod
    def step(self):
        """Performs exactly one leftmost-outermost beta contraction. A term without redexes is returned unchanged."""

    def free_variables(self):
        """Free occurrences in self, left to right (a name appears once per free occurrence)."""
        free = []

        def collect(node, bound):
            if isinstance(node, Variable):
                if node.name not in bound:
                    free.append(node.name)
            elif isinstance(node, Abstraction):
                collect(node.body, bound | {node.param})
            else:
                collect(node.fn, bound)
                collect(node.arg, bound)

        collect(self, frozenset())
        return free

    def fresh_name(self, *others):
        """Returns the first of v0, v1, v2, ... that isn't free in self (or in any of others)."""
        free = set(self.free_variables())
        for other in others:
            free.update(other.free_variables())
        for idx in count():
            name = f"{LambdaTerm.FRESH_PREFIX}{idx}"
            if name not in free:
                return name

    def display(self, indents=0):
        """Recursively displays the syntax tree in a readable format.

        Format:
        <LambdaTerm>(expr='<expr>', nodes=[
            <LambdaTerm>(expr='<expr>', nodes=[
                ...
                <LambdaTerm>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{type(self).__name__}('{self}')"


class Variable(LambdaTerm):
    """Variable in lambda calculus: alphanumeric name, starting with a letter."""
    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    @property
    def nodes(self):
        return ()

    def occurs_free(self, var):
        return self.name == var

    def sub(self, var, new_term):
        if self.name == var:
            return new_term
        return self

    def has_redex(self):
        return False

    def step(self):
        return self

    def __str__(self):
        return self.name

    def __eq__(self, other):
        return isinstance(other, Variable) and self.name == other.name

    def __hash__(self):
        return hash(("var", self.name))


class Abstraction(LambdaTerm):
    """Abstraction: binds param inside body."""
    __slots__ = ("param", "body")

    def __init__(self, param, body):
        self.param = param
        self.body = body

    @property
    def nodes(self):
        return Variable(self.param), self.body

    def occurs_free(self, var):
        return self.param != var and self.body.occurs_free(var)

    def sub(self, var, new_term):
        if self.param == var:
            return self  # var is shadowed by this abstraction's parameter

        if new_term.occurs_free(self.param):
            # substituting as-is would capture new_term's free param, so rename param first
            fresh = new_term.fresh_name(self.body)
            body = self.body.sub(self.param, Variable(fresh))
            return Abstraction(fresh, body.sub(var, new_term))

        return Abstraction(self.param, self.body.sub(var, new_term))

    def has_redex(self):
        return self.body.has_redex()

    def step(self):
        return Abstraction(self.param, self.body.step())

    def __str__(self):
        return f"\\{self.param}.{self.body}"

    def __eq__(self, other):
        return isinstance(other, Abstraction) and self.param == other.param and self.body == other.body

    def __hash__(self):
        return hash(("abs", self.param, self.body))


class Application(LambdaTerm):
    """Application of fn to arg."""
    __slots__ = ("fn", "arg")

    def __init__(self, fn, arg):
        self.fn = fn
        self.arg = arg

    @property
    def nodes(self):
        return self.fn, self.arg

    @property
    def is_redex(self):
        """An Application is a redex if its left child is an Abstraction."""
        return isinstance(self.fn, Abstraction)

    def occurs_free(self, var):
        return self.fn.occurs_free(var) or self.arg.occurs_free(var)

    def sub(self, var, new_term):
        return Application(self.fn.sub(var, new_term), self.arg.sub(var, new_term))

    def has_redex(self):
        return self.is_redex or self.fn.has_redex() or self.arg.has_redex()

    def step(self):
        if self.is_redex:
            return self.fn.body.sub(self.fn.param, self.arg)
        elif self.fn.has_redex():
            return Application(self.fn.step(), self.arg)
        return Application(self.fn, self.arg.step())

    def __str__(self):
        return " ".join(str(node) if isinstance(node, Variable) else f"({node})" for node in self.nodes)

    def __eq__(self, other):
        return isinstance(other, Application) and self.fn == other.fn and self.arg == other.arg

    def __hash__(self):
        return hash(("app", self.fn, self.arg))
