"""Runs a Lox script, or starts the command-line shell when no script is given. Called from the plox console script.

Exit status: 65 if the script has syntax errors, 70 if it fails at run time (or overflows the stack), 1 if it can't be
read, 0 otherwise.
"""

import argparse
import sys

from plox.lang.error import ErrorHandler
from plox.lang.session import Session
from plox.lang.shell import Shell


def main(argv=None):
    """Runs the Lox interpreter."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="plox", description="Tree-walking interpreter for the Lox language")
        parser.add_argument("file", help="script to run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--tokens", action="store_true", help="print the scanned tokens before running")
        parser.add_argument("--ast", action="store_true", help="print the syntax tree of each statement before running")
        args = parser.parse_args(argv)

        if args.file is not None:
            sess = Session(error_handler, args.file, show_tokens=args.tokens, show_ast=args.ast)
            sys.exit(sess.run().exit_code)

        sess = Session(error_handler, Session.SH_FILE, cmd_line=True, show_tokens=args.tokens, show_ast=args.ast)
        Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
