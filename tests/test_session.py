import contextlib
import io
import os
import tempfile
import unittest

from lcbot.lang.error import ErrorHandler, GenericException
from lcbot.lang.listener import EvalListener
from lcbot.lang.session import PARSE_ERROR, RECURSION, TIMEOUT, Session, evaluate
from lcbot.lang.shell import Shell
from lcbot.main import main


OMEGA = r"(\x.x x) (\x.x x)"


class EvaluateTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.error_handler = ErrorHandler(fatal=False, stream=self.stream)

    def test_evaluate(self):
        cases = {
            r"\x.x": r"\x.x",
            r"(\x.x) y": "y",
            r"\x y.x y": r"\x.\y.x y",
            r"(\x.\y.x)a b": "a",
            r"(\y.\x.y)(x)": r"\v0.x",
            r"let I = (\x.x) y": "y",  # one-shot evaluation drops the name
            "(a": PARSE_ERROR,
            r"\.x": PARSE_ERROR,
            "": PARSE_ERROR,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, evaluate(case, error_handler=self.error_handler), case)

    def test_timeout(self):
        self.assertEqual(TIMEOUT, evaluate(OMEGA, limit=0.05, error_handler=self.error_handler))

    def test_recursion(self):
        self.assertEqual(RECURSION, evaluate("(" * 5000 + "x" + ")" * 5000, error_handler=self.error_handler))

    def test_verbose(self):
        error_handler = ErrorHandler(fatal=False, stream=self.stream, verbose=True, plain=True)
        self.assertEqual("a", evaluate(r"(\x.\y.x) a b", error_handler=error_handler))
        self.assertEqual("= ((\\x.\\y.x) a) b\nβ (\\y.a) b\nβ a\n", self.stream.getvalue())


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.sess = Session(ErrorHandler(fatal=False, stream=self.stream))

    def test_let(self):
        cases = [
            (r"let I = \x.x", "I defined"),
            ("I y", "y"),
            (r"let K = \x y.x", "K defined"),
            ("K a b", "a"),
            ("let J = I I", "J defined"),
            ("J z", "z"),
            (r"\I.I", r"\I.I"),  # bound I shadows the let binding
            ("let I = K", "I defined"),  # rebinding doesn't change J
            ("J z", "z"),
            ("I a b", "a"),
        ]
        for case, expected in cases:
            self.assertEqual(expected, self.sess.evaluate(case), case)

        self.assertEqual([r"I = \x.\y.x", r"K = \x.\y.x", r"J = (\x.x) (\x.x)"], self.sess.names())

    def test_let_binds_at_definition_time(self):
        cases = [
            [r"let a = b", r"let b = \z.z", "a"],
            ["let a = b", "let b = c", "let b = d", "a"],
            ["let a = b", "let b = a", "b"],
        ]
        for lines in cases:
            sess = Session(ErrorHandler(fatal=False, stream=self.stream))
            replies = [sess.evaluate(line) for line in lines]
            self.assertEqual("b", replies[-1], lines)

    def test_let_avoids_capture(self):
        self.sess.evaluate("let f = y")
        self.assertEqual(r"\v0.y", self.sess.evaluate(r"(\x.\y.x) f"))

    def test_errors(self):
        self.assertEqual(PARSE_ERROR, self.sess.evaluate("(a"))
        self.assertEqual(PARSE_ERROR, self.sess.evaluate("let f = f x"))
        self.assertIn("recursive definitions not supported", self.stream.getvalue())
        self.assertEqual([], self.sess.names())
        self.assertEqual("", self.sess.evaluate("   "))

    def test_timeout(self):
        sess = Session(ErrorHandler(fatal=False, stream=self.stream), limit=0.05)
        sess.evaluate(f"let w = {OMEGA}")
        self.assertEqual(TIMEOUT, sess.evaluate("w"))
        self.assertEqual("b", sess.evaluate(r"(\x.b) w"))

    def test_add_run_pop(self):
        self.assertTrue(self.sess.add(r"let I = \x.x"))
        self.assertTrue(self.sess.add("I a"))
        self.assertFalse(self.sess.add("(a"))
        self.assertEqual([], self.sess.results)

        self.sess.run()
        self.assertEqual("I defined", self.sess.pop())
        self.assertEqual("a", self.sess.pop())
        self.assertEqual(PARSE_ERROR, self.sess.pop())

    def test_preprocess_line(self):
        cases = {
            "x y ;; comment": ("x y", False),
            "(x y": ("(x y", True),
            ";; only a comment": ("", False),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Session.preprocess_line(case, 1, False), case)


class FileSessionTestCase(unittest.TestCase):
    SOURCE = (";; identity\n"
              "let I = \\x.x\n"
              "\n"
              "I (a\n"
              "   b)\n"
              "(\\x.\\y.x) p q  ;; K\n")

    def setUp(self):
        self.stream = io.StringIO()
        self.dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.dir.name, "source.lc")
        with open(self.path, "w") as file:
            file.write(FileSessionTestCase.SOURCE)

    def tearDown(self):
        self.dir.cleanup()

    def test_file(self):
        sess = Session(ErrorHandler(stream=self.stream), self.path, cmd_line=False)
        sess.run()
        self.assertEqual(["I defined", "a b", "p"], sess.results)

    def test_bad_paths(self):
        error_handler = ErrorHandler(stream=self.stream)
        self.assertRaises(GenericException, Session, error_handler, os.path.join(self.dir.name, "nope"), cmd_line=False)
        self.assertRaises(GenericException, Session, error_handler, Session.SH_FILE, cmd_line=False)

    def test_main(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main([self.path])
        self.assertEqual("I defined\na b\np\n", out.getvalue())

    def test_main_limit(self):
        with open(self.path, "w") as file:
            file.write(OMEGA + "\n")

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(["--limit", "0.05", self.path])
        self.assertEqual(TIMEOUT + "\n", out.getvalue())

    def test_main_parse_error_exits(self):
        with open(self.path, "w") as file:
            file.write("(a\n")

        with contextlib.redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit):
                main([self.path])


class EvalListenerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.listener = EvalListener(limit=0.05, stream=self.stream)

    def test_handle(self):
        cases = {
            r"(\x.x) y": "y",
            r"(\y.\x.y)(x)": r"\v0.x",
            OMEGA: TIMEOUT,
            "(a": PARSE_ERROR,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.listener.handle(case), case)
        self.assertIsNone(self.listener.handle(""))
        self.assertIsNone(self.listener.handle("   "))
        self.assertIsNone(self.listener.handle("\t\n", "general"))

    def test_channels(self):
        self.assertEqual("I defined", self.listener.handle(r"let I = \x.x", "general"))
        self.assertEqual("y", self.listener.handle("I y", "general"))
        self.assertEqual("I y", self.listener.handle("I y", "random"))

    def test_lex_error_diagnostic(self):
        self.assertEqual(PARSE_ERROR, self.listener.handle(r"\.x", "general"))
        self.assertIn("error:1\n\\.x\n_^ variable must be at least 1 character", self.stream.getvalue())
        self.assertNotIn("\x1b[", self.stream.getvalue())

    def test_listener_interface(self):
        self.assertTrue(self.listener.only_when_addressed())
        self.assertIn("let", self.listener.help())
        self.assertTrue(self.listener.re().search("x"))


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.shell = Shell(Session(ErrorHandler(fatal=False, stream=io.StringIO())), stdout=self.out)

    def test_default(self):
        self.shell.onecmd(r"(\x.x) y")
        self.shell.onecmd(r"let I = \x.x")
        self.shell.onecmd("I z")
        self.shell.onecmd("env")
        self.assertEqual("y\nI defined\nz\nI = \\x.x\n", self.out.getvalue())

    def test_continuation(self):
        self.shell.onecmd("(a")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.shell.onecmd("b)")
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)
        self.assertEqual("a b\n", self.out.getvalue())

    def test_parse_error_keeps_running(self):
        self.assertFalse(self.shell.onecmd(r"\.x"))
        self.assertFalse(self.shell.onecmd("x"))
        self.assertEqual(f"{PARSE_ERROR}\nx\n", self.out.getvalue())

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))

    def test_command_words_with_arguments(self):
        self.assertFalse(self.shell.onecmd("exit y"))
        self.assertFalse(self.shell.onecmd("help x"))
        self.assertFalse(self.shell.onecmd(r"env (\x.x) e"))
        self.assertEqual("exit y\nhelp x\nenv e\n", self.out.getvalue())


if __name__ == '__main__':
    unittest.main()
