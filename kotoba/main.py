"""Runs the kotoba interpreter on a .kt file, or in command-line mode if no file is given. Also uses error handling
context manager. Called from the kotoba console script.
"""

import argparse

from kotoba.lang.error import ErrorHandler
from kotoba.lang.session import Session
from kotoba.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="kotoba", description="kotoba language interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--short-circuit", action="store_true",
                        help="'and'/'or' skip their right operand when the left one decides the result")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of each parsed input")
    return parser


def main(argv=None):
    """Runs kotoba interpreter. Called from kotoba console script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, short_circuit=args.short_circuit,
                           show_ast=args.ast)
            sess.run()

            while sess.results:
                print(sess.results.pop(0))

        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, short_circuit=args.short_circuit,
                           show_ast=args.ast)
            Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
