"""
The set of term-tree nodes in simple form.

Parsing is somebody else's business: these nodes arrive already built,
either constructed directly or via the JSON loader in front_end.
Type annotations within them are ordinary calculus types.
Each node may carry the location the parser attached to it, for diagnostics.
"""
from typing import NamedTuple, Optional, Sequence
from .calculus import NoetherType, Param

class Loc(NamedTuple):
	""" Line is 1-based; column is 0-based, as the parser reports them. """
	line: int
	column: int
	end_line: Optional[int] = None
	end_column: Optional[int] = None

class Term:
	loc: Optional[Loc] = None
	def located(self, loc:Optional[Loc]) -> "Term":
		self.loc = loc
		return self

class TrueLit(Term):
	def __repr__(self): return "true"

class FalseLit(Term):
	def __repr__(self): return "false"

class NumberLit(Term):
	def __init__(self, n): self.n = n
	def __repr__(self): return repr(self.n)

class Add(Term):
	def __init__(self, left:Term, right:Term):
		self.left, self.right = left, right
	def __repr__(self): return "(%r + %r)" % (self.left, self.right)

class If(Term):
	def __init__(self, cond:Term, then:Term, otherwise:Term):
		self.cond, self.then, self.otherwise = cond, then, otherwise
	def __repr__(self): return "(%r ? %r : %r)" % (self.cond, self.then, self.otherwise)

class Var(Term):
	def __init__(self, name:str):
		assert isinstance(name, str)
		self.name = name
	def __repr__(self): return self.name

def _formals(params:Sequence[Param]):
	return "(%s)" % ", ".join("%s: %r" % (p.name, p.type) for p in params)

class Func(Term):
	""" An anonymous function. The result type is optional; when given, it gets checked. """
	def __init__(self, params:Sequence[Param], body:Term, result_type:Optional[NoetherType]=None):
		self.params = tuple(Param(*p) for p in params)
		self.body = body
		self.result_type = result_type
	def __repr__(self): return "%s => ..." % _formals(self.params)

class Call(Term):
	def __init__(self, func:Term, args:Sequence[Term]):
		self.func, self.args = func, tuple(args)
	def __repr__(self): return "%r(%s)" % (self.func, ", ".join(map(repr, self.args)))

class Seq(Term):
	def __init__(self, body:Term, rest:Term):
		self.body, self.rest = body, rest
	def __repr__(self): return "%r; ..." % (self.body,)

class Const(Term):
	def __init__(self, name:str, init:Term, rest:Term):
		self.name, self.init, self.rest = name, init, rest
	def __repr__(self): return "const %s = %r; ..." % (self.name, self.init)

class ObjectNew(Term):
	def __init__(self, props:Sequence[tuple[str, Term]]):
		self.props = tuple(props)
		assert len({name for name, _ in self.props}) == len(self.props), "Duplicate property"
	def __repr__(self): return "{ %s }" % ", ".join("%s: %r" % p for p in self.props)

class ObjectGet(Term):
	def __init__(self, obj:Term, prop_name:str):
		self.obj, self.prop_name = obj, prop_name
	def __repr__(self): return "%r.%s" % (self.obj, self.prop_name)

class RecFunc(Term):
	""" A named function which may call itself. Its result type must be declared. """
	def __init__(self, name:str, params:Sequence[Param], result_type:NoetherType, body:Term, rest:Term):
		self.name = name
		self.params = tuple(Param(*p) for p in params)
		self.result_type = result_type
		self.body, self.rest = body, rest
	def __repr__(self): return "function %s%s: %r" % (self.name, _formals(self.params), self.result_type)

class TypeAbs(Term):
	def __init__(self, type_params:Sequence[str], body:Term):
		self.type_params = tuple(type_params)
		self.body = body
	def __repr__(self): return "<%s>%r" % (", ".join(self.type_params), self.body)

class TypeApp(Term):
	def __init__(self, target:Term, type_args:Sequence[NoetherType]):
		self.target, self.type_args = target, tuple(type_args)
	def __repr__(self): return "%r<%s>" % (self.target, ", ".join(map(repr, self.type_args)))
