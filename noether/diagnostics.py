"""
How the driver tells people about type errors.

The relation engine never complains: it answers yes or no. Deciding that "no"
means "argument type mismatch" rather than "wrong return type" is the driver's job,
and the driver files each such finding here as an issue with a definite kind.
Defects (ill-formed types reaching the engine) are assertion failures instead,
and never pass through this module.
"""
import sys, random
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence
from boozetools.support.failureprone import SourceText, illustration

from .calculus import NoetherType
from .syntax import Term, Loc

class TooManyIssues(Exception):
	pass

class ErrorKind(Enum):
	NUMBER_EXPECTED = "number expected"
	BRANCH_MISMATCH = "branches must have the same type"
	UNKNOWN_VARIABLE = "Unknown variable"
	UNKNOWN_TYPE_VARIABLE = "Unknown type variable"
	UNKNOWN_PROPERTY = "Unknown property"
	FUNCTION_EXPECTED = "function expected"
	OBJECT_EXPECTED = "object expected"
	TYPE_ABSTRACTION_EXPECTED = "type abstraction expected"
	WRONG_ARGUMENT_COUNT = "wrong number of arguments"
	WRONG_TYPE_ARGUMENT_COUNT = "wrong number of type arguments"
	ARGUMENT_MISMATCH = "argument type mismatch"
	WRONG_RETURN_TYPE = "wrong return type"
	LOAD_FAILURE = "could not load the term tree"

def _outburst():
	particle = ["Oh, ", "Well, ", "Hmm, ", "", ""]

	exclamations = [
		'Alas', 'Bother', 'Botheration', 'Confound it', 'Drat',
		'Fiddlesticks', 'Good Grief', 'Goodness', 'Gracious', 'Heavens',
		'Mercy', 'Nuts', 'Oh dear', 'Rats', 'Zounds',
	]

	resignations = [
		'These types do not add up.',
		'Something here does not fit.',
		'I cannot vouch for this program.',
		'The pieces will not line up.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, exclamations, resignations)))

class Annotation:
	"""
	Points at a term. When both the term's location and the source text are known,
	the annotation illustrates the offending line; otherwise it describes the term.
	"""
	def __init__(self, report:"Report", term:Term, caption:str=""):
		self.term = term
		self.caption = caption
		self._source = report.source
		self._line_starts = report.line_starts

	def illustrate(self):
		loc = self.term.loc
		if loc is None or self._source is None or not 0 < loc.line < len(self._line_starts):
			text = "    at %r" % self.term
			return text + (": " + self.caption if self.caption else "")
		start, end = self._line_starts[loc.line - 1], self._line_starts[loc.line]
		# A column past the end of its line must not spill over into the next.
		line_length = len(self._source.content[start:end].rstrip("\r\n"))
		column = min(max(0, loc.column), line_length)
		row, col = self._source.find_row_col(start + column)
		single_line = self._source.line_of_text(row)
		width = max(1, _width(loc, column, line_length))
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

def _width(loc:Loc, column:int, line_length:int):
	if loc.end_line == loc.line and loc.end_column is not None: return loc.end_column - column
	return line_length - column

class Pic:
	""" One issue: what kind it is, what it says, and where. """
	def __init__(self, kind:ErrorKind, intro:str, anns:list[Annotation], footer=()):
		self.kind = kind
		self._intro, self._anns, self._footer = intro, anns, footer
	def also(self, ann:Annotation): self._anns.append(ann)
	@property
	def description(self): return self._intro
	def as_text(self):
		lines = [self._intro, ""]
		lines.extend(ann.illustrate() for ann in self._anns)
		lines.extend(self._footer)
		return '\n'.join(lines)
	def __repr__(self): return "<Pic %s: %s>" % (self.kind.name, self._intro)

class Report:
	""" Collects the issues found while checking one program. """
	_issues : list[Pic]
	source: Optional[SourceText]
	line_starts: list[int]

	def __init__(self, *, verbose:int=0, max_issues=3):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues
		self.source = None
		self.line_starts = []

	def attach_source(self, text:str, path:Optional[Path]=None):
		""" With the original program text in hand, issues can show where they happened. """
		self.source = SourceText(text, filename=str(path) if path else None)
		self.line_starts = [0]
		for line in text.splitlines(keepends=True):
			self.line_starts.append(self.line_starts[-1] + len(line))

	@property
	def issues(self) -> list[Pic]: return self._issues
	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)
	def kinds(self) -> list[ErrorKind]: return [i.kind for i in self._issues]

	def issue(self, it:Pic):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def reset(self):
		self._issues.clear()

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def chatter(self, *args):
		""" For the more-verbose setting """
		if self._verbose > 1:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	def _complain(self, kind:ErrorKind, intro:str, guilty:Sequence[tuple[Term, str]], footer=()):
		self.issue(Pic(kind, intro, [Annotation(self, t, caption) for t, caption in guilty], footer))

	# Methods the loader calls:

	def no_such_file(self, path:Path):
		self.issue(Pic(ErrorKind.LOAD_FAILURE, "I see no file called "+str(path), []))

	def broken_file(self, path:Path, why:Any):
		intro = "Something went pear-shaped while trying to read "+str(path)
		self.issue(Pic(ErrorKind.LOAD_FAILURE, intro, [], [str(why)]))

	def malformed_node(self, where:str, why:str):
		intro = "The term tree is malformed at %s"%where
		self.issue(Pic(ErrorKind.LOAD_FAILURE, intro, [], [why]))

	# Methods the type-checker calls:

	def number_expected(self, term:Term, got:NoetherType):
		self._complain(ErrorKind.NUMBER_EXPECTED, "number expected", [(term, "Found to be %s" % got)])

	def branch_mismatch(self, term:Term, then_type:NoetherType, else_type:NoetherType):
		intro = "branches must have the same type"
		footer = ["The first branch is %s." % then_type, "The other branch is %s." % else_type]
		self._complain(ErrorKind.BRANCH_MISMATCH, intro, [(term, "")], footer)

	def unknown_variable(self, term:Term, name:str):
		self._complain(ErrorKind.UNKNOWN_VARIABLE, "Unknown variable: %s" % name, [(term, "")])

	def unknown_type_variable(self, term:Term, name:str):
		intro = "Unknown type variable: %s" % name
		footer = ["No enclosing type parameter goes by that name."]
		self._complain(ErrorKind.UNKNOWN_TYPE_VARIABLE, intro, [(term, "")], footer)

	def unknown_property(self, term:Term, name:str, got:NoetherType):
		intro = "Unknown property: %s" % name
		self._complain(ErrorKind.UNKNOWN_PROPERTY, intro, [(term, "%s has no such field" % got)])

	def function_expected(self, term:Term, got:NoetherType):
		self._complain(ErrorKind.FUNCTION_EXPECTED, "function expected", [(term, "Found to be %s" % got)])

	def object_expected(self, term:Term, got:NoetherType):
		self._complain(ErrorKind.OBJECT_EXPECTED, "object expected", [(term, "Found to be %s" % got)])

	def type_abstraction_expected(self, term:Term, got:NoetherType):
		intro = "type abstraction expected"
		self._complain(ErrorKind.TYPE_ABSTRACTION_EXPECTED, intro, [(term, "Found to be %s" % got)])

	def wrong_arity(self, term:Term, need:int, got:int):
		plural = '' if need == 1 else 's'
		caption = "This takes %d argument%s, but got %d instead." % (need, plural, got)
		self._complain(ErrorKind.WRONG_ARGUMENT_COUNT, "wrong number of arguments", [(term, caption)])

	def wrong_type_arity(self, term:Term, need:int, got:int):
		caption = "%d type-arguments were given; %d are needed." % (got, need)
		self._complain(ErrorKind.WRONG_TYPE_ARGUMENT_COUNT, "wrong number of type arguments", [(term, caption)])

	def bad_argument(self, term:Term, need:NoetherType, got:NoetherType):
		caption = "This %s needs to be a(n) %s." % (got, need)
		self._complain(ErrorKind.ARGUMENT_MISMATCH, "argument type mismatch", [(term, caption)])

	def bad_result(self, term:Term, declared:NoetherType, produced:NoetherType):
		footer = ["Declared %s" % declared, "Produced %s" % produced]
		self._complain(ErrorKind.WRONG_RETURN_TYPE, "wrong return type", [(term, "")], footer)

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
