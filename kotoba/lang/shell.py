"""Handles interactive/command-line mode for the kotoba interpreter. Uses cmd as backend.

Only a line consisting of a bare command word is a shell command; every other line is kotoba source, so names like
'exit' or 'help' can still be used as variables and functions.
"""

import cmd


class Shell(cmd.Cmd):
    """kotoba interpreter shell."""
    intro = "kotoba interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "::<> "
    secondary_prompt = "...  "  # used for line continuations
    _tmp_prompt = "::<> "       # also used for prompt swapping in line continuations

    commands = ("help", "exit")
    aliases = {"?": "help"}

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self._start_line = 1  # line num of the first line of a continued input
        self.line_num = 0

    def parseline(self, line):
        """Returns (command, arg, line). command is None unless line is a bare command word; cmd.Cmd then hands the
        line to default. EOF always ends the shell, even halfway through a continued input.
        """
        line = line.strip()
        word = self.aliases.get(line, line)

        if word == "EOF" or (word in self.commands and not self._tmp_line):
            return word, "", word
        return None, None, line

    def default(self, line):
        """Evaluates an arbitrary kotoba line."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self._start_line = self.line_num

            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(line, self._start_line)
                self.sess.run()

                if self.sess.results:
                    print(f"=> {self.sess.pop()}", file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the kotoba interpreter!\n\n"
              "kotoba is a small expression language with numbers, booleans, strings and nil.\n"
              "Statements are separated by ',' and blocks are written 'if COND : BODY else BODY ;',\n"
              "'while COND : BODY ;' and 'fn NAME(PARAMS) : BODY ;'.\n\n"
              "Try it out by typing 'x = 5'. Next, try typing 'x + 1'. This will give 6 as the\n"
              "result. Variables survive between lines, and 'println(\"hi\")' prints.\n\n"
              "Type 'exit' on its own to leave.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
