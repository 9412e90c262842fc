"""Session control for the sim language. Runs the tokenizer, parser and evaluator over a file or over lines typed in
command-line mode.

A Session owns a single Evaluator, so functions and top-level variables defined by one interactive line are still
there for the next. Top-level statements are evaluated one at a time so that their plain values can be shown; a
top-level `return` (or a call whose body returned) ends the run and its value becomes the final result.
"""

from collections import deque

from sim.lang.error import GenericException
from sim.pure.evaluator import Evaluator
from sim.pure.lexical import Tokenizer
from sim.pure.parser import Parser


class Session:
    """Governs a sim session: one evaluation context, fed by add and drained by run."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, flat_operators=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                      # used for error messages
        self.cmd_line = cmd_line              # whether or not in command-line mode
        self.flat_operators = flat_operators  # parse every binary operator on one right-associative tier

        self.evaluator = Evaluator()
        self.to_exec = deque()  # queue of (source, line num, statement) waiting to be evaluated
        self.results = []  # literals produced by the last run

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
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Joins line onto add_to_prev (text of previous unfinished lines) and returns the joined text along with
        whether it still has unclosed parentheses or braces, meaning a line continuation is necessary. String literals
        and // comments are not counted.
        """
        line = f"{add_to_prev}\n{line}" if add_to_prev else line
        depth = 0
        in_string = False

        idx = 0
        while idx < len(line):
            char = line[idx]
            if in_string:
                in_string = char != "\""
            elif char == "\"":
                in_string = True
            elif line.startswith("//", idx):
                idx = line.find("\n", idx)
                if idx == -1:
                    break
            elif char in "({":
                depth += 1
            elif char in ")}":
                depth -= 1
            idx += 1

        if in_string:  # trailing spaces belong to the string literal
            return line, True
        return line.rstrip(), depth > 0

    def add(self, source, line_num=1):
        """Tokenizes and parses source, queueing its top-level statements. Nothing is evaluated until run is called;
        if source does not parse, nothing is queued.
        """
        self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

        tokens = Tokenizer(source).tokenize()
        self.error_handler.register_step("tokens", " ".join(token.describe() for token in tokens))

        program = Parser(tokens, self.flat_operators, source).parse()
        self.error_handler.register_step("ast", program)

        self.to_exec.extend((source, line_num, statement) for statement in program.statements)
        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Evaluates queued statements in order. Will raise any errors that are encountered, after discarding the
        rest of the queue.
        """
        self.results = []
        try:
            while self.to_exec:
                source, line_num, statement = self.to_exec.popleft()
                self.error_handler.register_line(self.path, source, line_num)

                result = self.evaluator.evaluate(statement)
                self.error_handler.register_step("result", f"{type(result).__name__}({result.literal})")
                self.error_handler.remove_line(self.path)

                if result.returning:
                    self.results.append(result.literal)
                    if self.to_exec:
                        self.error_handler.warn("top-level return: {} statement(s) not evaluated", len(self.to_exec),
                                                diagnosis=False)
                    break
                elif not result.literal.is_unit:
                    self.results.append(result.literal)
        finally:
            self.to_exec.clear()

    def pop(self):
        """Removes and returns display text of the most recent result."""
        return str(self.results.pop())
