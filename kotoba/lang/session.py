"""Session control for the kotoba language: parses source, queues it, and evaluates it against an environment that
persists for the whole session, either in command-line mode or file interpretation mode.
"""

from kotoba.core.environment import Environment
from kotoba.core.parser import Parser
from kotoba.core.runtime import Evaluator
from kotoba.lang.error import GenericException
from kotoba.lang.prelude import PRELUDE


class Session:
    """Governs a kotoba session, with control over the root scope that variables and functions are bound in."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, builtins=None, short_circuit=False, show_ast=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.show_ast = show_ast  # whether or not to print each parsed tree

        self.env = Environment(PRELUDE if builtins is None else builtins)
        self.evaluator = Evaluator(short_circuit)

        self.to_exec = {}  # dict of line num: (source, tree) to evaluate
        self.results = []  # Values of evaluated trees, oldest first

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            self.add(source, 1)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line):
        """Preprocesses a line from the command-line. Returns the line with trailing whitespace removed and whether or
        not it needs a continuation line (it has unclosed parentheses outside of string literals).
        """
        line = line.rstrip()

        depth = 0
        in_string = False
        for char in line:
            if char == "\"":
                in_string = not in_string
            elif not in_string and char == "(":
                depth += 1
            elif not in_string and char == ")":
                depth -= 1

        return line, depth > 0

    def add(self, source, line_num=1):
        """Parses source and queues it for evaluation. Evaluation is delayed until run is called."""
        self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

        tree = Parser(source, self.error_handler).parse()
        if self.show_ast:
            print(tree.display())

        self.to_exec[line_num] = (source, tree)
        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Evaluates queued trees in order, storing their Values in self.results. Will raise any errors that are
        encountered.
        """
        for line_num, (source, tree) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, source, line_num)

            try:
                self.results.append(self.evaluator.eval(tree, self.env))
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the display form of the newest result."""
        return str(self.results.pop())
