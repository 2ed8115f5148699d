"""Handles interactive/command-line mode for lcbot. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lambda calculus evaluator shell."""
    intro = "Lambda calculus evaluator :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Evaluates arbitrary lambda calculus statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(f"{self._tmp_line} {line}", self.line_num, False)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            self.sess.add(line, self.line_num)
            self.sess.run()
            while self.sess.results:
                print(self.sess.pop(), file=self.stdout)

    def do_let(self, arg):
        """let NAME = TERM: binds NAME to TERM for the rest of the session."""
        self.default(f"let {arg}")

    def do_env(self, arg):
        """Lists names bound with let."""
        if arg:
            return self.default(f"env {arg}")
        for line in self.sess.names():
            print(line, file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return self.default(f"help {arg}")
        print("Welcome to the lcbot evaluator!\n\n"
              "Lambda calculus is a Turing-complete language created by Alonzo Church. Type a \n"
              "λ-term such as '(\\x.x) y' and its beta-normal form is printed ('y'). '\\x y.M' \n"
              "is short for '\\x.\\y.M', and 'λ' may be used in place of '\\'.\n\n"
              "Try it out by typing 'let I = \\x.x'. This will bind the lambda term '\\x.x' to \n"
              "the name 'I'. Next, try typing 'I y'. This will apply 'I' to 'y', giving 'y' as \n"
              "the result. 'env' lists bound names, 'exit' quits. Followed by anything else, 'env', 'exit' \n"
              "and 'help' are evaluated as variables instead.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits evaluator."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits evaluator."""
        if arg:
            return self.default(f"exit {arg}")
        return True
