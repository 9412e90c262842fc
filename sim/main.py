"""Runs the sim interpreter on a .sim file or in command-line mode, using the error handling context manager. Called
from the sim console script.
"""

import argparse

from sim.lang.error import ErrorHandler
from sim.lang.session import Session
from sim.lang.shell import Shell


def main(argv=None):
    """Runs sim interpreter. Called from sim console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="sim", description="Interpreter for the sim language.")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--flat-operators", action="store_true",
                            help="give every binary operator the same precedence, associating to the right")
        parser.add_argument("--trace", action="store_true", help="print tokens, syntax tree and results as they are "
                                                                 "produced")
        args = parser.parse_args(argv)

        error_handler.trace = args.trace

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, flat_operators=args.flat_operators)
            sess.run()

            if sess.results:
                print(sess.pop())

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, flat_operators=args.flat_operators)).cmdloop()
