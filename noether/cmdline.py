"""
This is a type-checker for already-parsed programs in a small typed language
with records, generics, and recursive types.

{0}

For example:

    noether program.json

will check the term tree in program.json and print its type, or else try to explain why not.

    noether program.json --source program.ts

does the same, but points at the offending lines of the original program text.

    noether -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

parser = argparse.ArgumentParser(
	prog="noether",
	description="Type-checker for term trees with structural, generic, and recursive types.",
)
parser.add_argument("program", help="A term tree in tagged-object JSON form.")
parser.add_argument('-s', "--source", help="The original program text, for illustrating complaints.")
parser.add_argument('-c', "--check", action="count", help="Report progress; say it twice for the type of every definition.")
parser.add_argument('-m', "--max-issues", type=int, default=3, help="Give up after this many issues. (Default %(default)s)")

def run(args):
	from .diagnostics import Report, TooManyIssues
	from .front_end import load_file, Yuck
	from .static.check import TypeChecker
	report = Report(verbose=args.check, max_issues=args.max_issues)
	try:
		try: term = load_file(Path.cwd() / args.program, report)
		except Yuck:
			assert report.sick()
			report.complain_to_console()
			return 1
		if args.source:
			source_path = Path.cwd() / args.source
			try:
				with open(source_path, "r", encoding="utf-8") as fh:
					report.attach_source(fh.read(), source_path)
			except OSError as ex:
				report.broken_file(source_path, ex)
				report.complain_to_console()
				return 1
		typ = TypeChecker(report).check_program(term)
		if report.sick():
			report.complain_to_console()
			return 1
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	print(typ)
	return 0

def main():
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
