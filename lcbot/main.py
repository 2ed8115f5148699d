"""Runs lcbot on a file of statements, or in command-line mode. Also uses error handling context manager. Called from
the lcbot console script.
"""

import argparse

from lcbot.lang.error import ErrorHandler
from lcbot.lang.session import Session
from lcbot.lang.shell import Shell
from lcbot.pure.reducer import NormalOrderReducer


def build_parser():
    parser = argparse.ArgumentParser(prog="lcbot", description="Untyped lambda calculus evaluator")
    parser.add_argument("file", help="file to evaluate, one statement per line (if empty, goes to command-line mode)",
                        nargs="?")
    parser.add_argument("-l", "--limit", type=float, default=NormalOrderReducer.DEFAULT_LIMIT,
                        help="seconds allowed to reduce each term (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="print every beta reduction step")
    return parser


def main(argv=None):
    """Runs lcbot. Called from lcbot console script."""
    args = build_parser().parse_args(argv)

    with ErrorHandler(verbose=args.verbose) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, limit=args.limit, cmd_line=False)
            sess.run()

            while sess.results:
                print(sess.pop())

        else:
            Shell(Session(error_handler, Session.SH_FILE, limit=args.limit, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
