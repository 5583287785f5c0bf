from contextlib import redirect_stdout
import io
import os
import tempfile
import unittest

from scopecalc.main import main, parse_args


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "main.sc")
        with open(self.path, "w") as file:
            file.write("(+ 1 2)\n(+ 1 z)\n(let ([f (lambda (x) 10)]) (f undefined-var))\n")

    def tearDown(self):
        self.tmp.cleanup()

    def test_parse_args(self):
        args = parse_args([])
        self.assertIsNone(args.file)
        self.assertEqual("lexical", args.strategy)
        self.assertFalse(args.keep_going)

        args = parse_args(["prog.sc", "-s", "lazy", "--keep-going"])
        self.assertEqual(("prog.sc", "lazy", True), (args.file, args.strategy, args.keep_going))

        with redirect_stdout(io.StringIO()), self.assertRaises(SystemExit):
            parse_args(["-s", "eager"])

    def test_fatal(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as context:
            main([self.path])
        self.assertEqual(1, context.exception.code)
        self.assertTrue(out.getvalue().startswith("3\n"))
        self.assertIn("is not bound in the current environment", out.getvalue())

    def test_keep_going(self):
        out = io.StringIO()
        with redirect_stdout(out):
            main([self.path, "--keep-going", "--strategy", "lazy"])
        lines = out.getvalue().splitlines()
        self.assertEqual("3", lines[0])
        self.assertEqual("10", lines[-1])

    def test_missing_file(self):
        missing = os.path.join(self.tmp.name, "missing.sc")
        for argv in ([missing], [missing, "--keep-going"]):
            out = io.StringIO()
            with redirect_stdout(out), self.assertRaises(SystemExit) as context:
                main(argv)
            self.assertEqual(1, context.exception.code)
            self.assertIn("could not be opened", out.getvalue())


if __name__ == '__main__':
    unittest.main()
