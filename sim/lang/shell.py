"""Handles interactive/command-line mode for the sim interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """sim interpreter shell."""
    intro = "sim interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self._tmp_line_num = 0  # line the pending continuation started on
        self.line_num = 0

    def onecmd(self, line):
        """Only a bare command word outside a line continuation is a shell command. Everything else is sim source,
        since 'help' or 'exit' are also valid sim names (help = 7;).
        """
        command, arg, stripped = self.parseline(line)
        if line == "EOF":  # end of input leaves even in the middle of a continuation
            return self.do_EOF(arg)
        elif self._tmp_line:
            return self.default(line)
        elif not stripped:
            return self.emptyline()
        elif command in ("help", "exit", "EOF") and not arg:
            return super().onecmd(line)
        return self.default(line)

    def default(self, line):
        """Executes arbitrary sim statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self._tmp_line_num = self.line_num
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(line, self._tmp_line_num)
                self.sess.run()

                if self.sess.results:
                    self.stdout.write(self.sess.pop() + "\n")

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        self.stdout.write(
            "Welcome to the sim interpreter!\n\n"
            "sim is a small language with integers, strings, variables, if/else, while loops\n"
            "and functions. Statements end with ';' and blocks are wrapped in braces.\n\n"
            "Try it out by typing 'function add(a, b) { return a + b; }'. This defines 'add'.\n"
            "Next, try typing 'add(2, 3);'. This calls 'add', giving 5 as the result.\n"
        )

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        self.stdout.write("\n")
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
