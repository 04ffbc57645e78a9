import io
import os
import tempfile
import unittest

from plox.lang.error import ErrorHandler, LoxError
from plox.lang.session import Outcome, Session


def make_session(cmd_line=True, **kwargs):
    """Returns (session, program output, diagnostic output)."""
    out = io.StringIO()
    stream = io.StringIO()
    sess = Session(ErrorHandler(stream=stream), cmd_line=cmd_line, out=out, **kwargs)
    return sess, out, stream


class OutcomeTestCase(unittest.TestCase):

    def test_exit_code(self):
        cases = {
            Outcome(): 0,
            Outcome(had_syntax_error=True): 65,
            Outcome(had_runtime_error=True): 70,
            Outcome(True, True): 65,
        }
        for outcome, expected in cases.items():
            self.assertEqual(expected, outcome.exit_code, outcome)
            self.assertEqual(expected == 0, outcome.ok, outcome)


class SessionTestCase(unittest.TestCase):

    def test_run(self):
        sess, out, stream = make_session()
        outcome = sess.run("print 1 + 2;")

        self.assertEqual("3\n", out.getvalue())
        self.assertEqual("", stream.getvalue())
        self.assertTrue(outcome.ok)

    def test_syntax_error_prevents_execution(self):
        for source in ["print 1; print ;", "print 1; @", "print 1; break;"]:
            sess, out, stream = make_session()
            outcome = sess.run(source)

            self.assertEqual("", out.getvalue(), source)
            self.assertEqual(65, outcome.exit_code, source)
            self.assertIn("syntax error", stream.getvalue(), source)

    def test_runtime_error(self):
        sess, out, stream = make_session()
        outcome = sess.run("print 1;\nprint x;\nprint 2;")

        self.assertEqual("1\n", out.getvalue())
        self.assertEqual(70, outcome.exit_code)
        self.assertIn("Undefined variable 'x'. [line:2]", stream.getvalue())
        self.assertIn("File '<in>', line 2:", stream.getvalue())

    def test_state_persists_between_lines(self):
        sess, out, stream = make_session()
        sess.run("let a = 2;")
        sess.run("fun triple(n) { return n * 3; }")
        sess.run("print triple(a);")
        self.assertEqual("6\n", out.getvalue())

    def test_errors_are_per_run(self):
        sess, out, stream = make_session()
        self.assertFalse(sess.run("x;").ok)
        self.assertTrue(sess.run("print 1;").ok)
        self.assertFalse(sess.error_handler.had_runtime_error)

    def test_command_line_echoes_expressions(self):
        sess, out, stream = make_session()
        sess.run("let a = 1;")
        sess.run("a = 4;")
        sess.run("a * 2;")
        self.assertEqual("8\n", out.getvalue())
        self.assertFalse(sess.error_handler.fatal)

    def test_file_does_not_echo(self):
        with tempfile.NamedTemporaryFile("w", suffix=".lox", delete=False) as file:
            file.write('1 + 2;\nprint "from file";\n')
        try:
            out = io.StringIO()
            sess = Session(ErrorHandler(stream=io.StringIO()), file.name, out=out)
            outcome = sess.run()
        finally:
            os.remove(file.name)

        self.assertEqual("from file\n", out.getvalue())
        self.assertEqual(0, outcome.exit_code)
        self.assertTrue(sess.error_handler.fatal)

    def test_file_errors_name_the_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".lox", delete=False) as file:
            file.write("print 1 +;\n")
        try:
            stream = io.StringIO()
            outcome = Session(ErrorHandler(stream=stream), file.name, out=io.StringIO()).run()
        finally:
            os.remove(file.name)

        self.assertEqual(65, outcome.exit_code)
        self.assertIn(f"File '{file.name}', line 1:", stream.getvalue())
        self.assertIn("[line: 1 Error at ';': Expect expression.]", stream.getvalue())

    def test_unreadable_file(self):
        with self.assertRaises(LoxError) as context:
            Session(ErrorHandler(), "/no/such/dir/script.lox")
        self.assertEqual("'/no/such/dir/script.lox' could not be opened", str(context.exception))

    def test_file_that_is_not_utf8(self):
        with tempfile.NamedTemporaryFile("wb", suffix=".lox", delete=False) as file:
            file.write(b"print \"\xff\xfe\";\n")
        try:
            with self.assertRaises(LoxError) as context:
                Session(ErrorHandler(), file.name)
        finally:
            os.remove(file.name)
        self.assertEqual(f"'{file.name}' could not be opened", str(context.exception))

    def test_utf8_file(self):
        with tempfile.NamedTemporaryFile("wb", suffix=".lox", delete=False) as file:
            file.write("print \"caf\u00e9\";\n".encode("utf-8"))
        try:
            out = io.StringIO()
            Session(ErrorHandler(stream=io.StringIO()), file.name, out=out).run()
        finally:
            os.remove(file.name)
        self.assertEqual("caf\u00e9\n", out.getvalue())

    def test_reserved_filename(self):
        with self.assertRaises(LoxError) as context:
            Session(ErrorHandler())
        self.assertEqual("'<in>' is a reserved filename", str(context.exception))

    def test_show_tokens(self):
        sess, out, stream = make_session(show_tokens=True)
        sess.run("1;")
        self.assertEqual(["NUMBER 1 1.0", "SEMICOLON ; nil", "EOF  nil", "1"], out.getvalue().splitlines())

    def test_show_ast(self):
        sess, out, stream = make_session(show_ast=True)
        sess.run("print 1;")
        self.assertEqual(["Print(nodes=[", "    Literal(value=1.0)", "])", "1"], out.getvalue().splitlines())

    def test_preprocess_line(self):
        source, incomplete = Session.preprocess_line("fun f() {")
        self.assertEqual(("fun f() {", True), (source, incomplete))

        source, incomplete = Session.preprocess_line("return 1; }", source)
        self.assertEqual(("fun f() {\nreturn 1; }", False), (source, incomplete))

        self.assertEqual(("print (1 +", True), Session.preprocess_line("print (1 +"))
        self.assertEqual(("print 1;", False), Session.preprocess_line("print 1;"))

    def test_preprocess_line_ignores_strings_and_comments(self):
        should_pass = ['print "(";', "print 1; // {", "/* ( */ print 1;", 'print "}" + "{";']
        for case in should_pass:
            self.assertEqual((case, False), Session.preprocess_line(case), case)

        self.assertEqual(('print ("{"', True), Session.preprocess_line('print ("{"'))


if __name__ == '__main__':
    unittest.main()
