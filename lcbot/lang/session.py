"""Session control for lcbot. A Session evaluates statements one line at a time and remembers `let` bindings, either
in command-line mode, file interpretation mode, or for a chat conversation.

Every evaluation resolves to a reply string: the printed beta-normal form, or one of Session.TIMEOUT,
Session.PARSE_ERROR, Session.RECURSION. Nothing raised while evaluating a term escapes to the caller.
"""

from lcbot.lang.error import ErrorHandler, GenericException
from lcbot.pure.parser import Let, Parser
from lcbot.pure.reducer import NormalOrderReducer
from lcbot.pure.term import Variable


TIMEOUT = "time limit exceeded"
PARSE_ERROR = "parse error"
RECURSION = "maximum recursion depth exceeded"


def reply(term, limit, error_handler=None):
    """Reduces term to beta-normal form and returns the reply string."""
    on_step = None
    if error_handler is not None and error_handler.verbose:
        error_handler.register_step("=", term)

        def on_step(__, tree):
            error_handler.register_step("β", tree)

    try:
        normal_form = NormalOrderReducer(term, on_step=on_step).beta_reduce(limit)
        return TIMEOUT if normal_form is None else str(normal_form)
    except RecursionError:
        return RECURSION


def evaluate(expr, limit=NormalOrderReducer.DEFAULT_LIMIT, error_handler=None):
    """One-shot evaluation of a line of text. A `let NAME =` prefix is accepted but the name is not remembered: use a
    Session for that.
    """
    try:
        stmt = Parser(error_handler).parse(expr)
    except RecursionError:
        return RECURSION

    if stmt is None:
        return PARSE_ERROR
    return reply(stmt.expr, limit, error_handler)


class Session:
    """Governs a lcbot session, with control over the scope of let-bound names."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    TIMEOUT = TIMEOUT
    PARSE_ERROR = PARSE_ERROR
    RECURSION = RECURSION

    def __init__(self, error_handler=None, path=SH_FILE, limit=NormalOrderReducer.DEFAULT_LIMIT, cmd_line=True):
        if error_handler is None:
            error_handler = ErrorHandler(fatal=not cmd_line)
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.limit = limit        # seconds per evaluation
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.parser = Parser(self.error_handler)

        self.namespace = {}  # dict of name: expanded LambdaTerm bound by let
        self.to_exec = []    # list of (line num, statement, expanded term or reply) not yet run
        self.results = []    # replies that haven't been popped yet

        if self.cmd_line:
            self.error_handler.fatal = False
        else:
            if path == Session.SH_FILE:
                raise GenericException("'<in>' is a reserved filename")

            exprs = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr, line_num in exprs:
                self.add(expr, line_num)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of file's exprs), but add_to_prev will indicate whether a line continuation is necessary. Returns
        updated value of line and add_to_prev.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.rstrip()
        if exprs is not None:
            if line and not line.isspace() and not add_to_prev:
                exprs.append((line, line_num))
            elif add_to_prev:
                prev, prev_num = exprs.pop()
                line = f"{prev} {line.strip()}"
                exprs.append((line, prev_num))

        return line, line.count("(") > line.count(")")

    def expand(self, term):
        """Substitutes let-bound names for their free occurrences in term, all at once: a name free in a bound value
        is never filled in by another binding.
        """
        values = list(self.namespace.values())
        placeholders = {}  # dict of placeholder name: bound value
        for name, value in self.namespace.items():
            if term.occurs_free(name):
                placeholder = term.fresh_name(*values)
                term = term.sub(name, Variable(placeholder))
                placeholders[placeholder] = value

        for placeholder, value in placeholders.items():
            term = term.sub(placeholder, value)
        return term

    def add(self, expr, line_num=0):
        """Parses expr and adds it to the current session. let statements are bound immediately and expressions are
        expanded with the names bound so far; beta-reduction is delayed until run is called. Returns whether expr
        could be parsed.
        """
        expr = expr.strip()
        if not expr:
            return False

        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised
        try:
            stmt = self.parser.parse(expr)
            if isinstance(stmt, Let) and stmt.expr.occurs_free(stmt.name):
                self.error_handler.throw(GenericException("recursive definitions not supported: '{}'", expr))
                stmt = None
            term = None if stmt is None else self.expand(stmt.expr)
        except RecursionError:
            self.to_exec.append((line_num, None, Session.RECURSION))
            return False

        if stmt is None:
            self.to_exec.append((line_num, None, Session.PARSE_ERROR))
            return False

        if isinstance(stmt, Let):
            self.namespace[stmt.name] = term
            self.to_exec.append((line_num, stmt, f"{stmt.name} defined"))
        else:
            self.to_exec.append((line_num, stmt, term))

        self.error_handler.remove_line(self.path)  # error was not raised
        return True

    def run(self):
        """Runs this session's pending statements by beta-reducing them. Replies are appended to self.results in the
        order their statements were added.
        """
        while self.to_exec:
            line_num, stmt, pending = self.to_exec.pop(0)
            if isinstance(pending, str):  # let binding or error, nothing to reduce
                self.results.append(pending)
                continue

            self.error_handler.register_line(self.path, str(stmt), line_num)
            self.results.append(reply(pending, self.limit, self.error_handler))
            self.error_handler.remove_line(self.path)

    def pop(self):
        """Returns the oldest reply that hasn't been popped yet."""
        return self.results.pop(0)

    def evaluate(self, expr):
        """Adds and runs expr, returning every reply it produced joined by newlines."""
        self.add(expr)
        self.run()

        replies = self.results
        self.results = []
        return "\n".join(replies)

    def names(self):
        """Returns let bindings as 'NAME = term' lines, in definition order."""
        return [f"{name} = {value}" for name, value in self.namespace.items()]
