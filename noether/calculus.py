"""
The data over which the type-relation engine operates.

Types here are value objects: immutable, hashable, and compared by structure.
Nothing in this module knows how to relate two types or to substitute into one;
that is the business of the substitution and relation modules.

The variants form a closed set:

1. Atoms: boolean and number.
2. Constructors: function (with named parameters) and record (with named fields).
3. Binders: type-abstraction (universal quantification over one or more names)
   and recursive (a name standing for the whole node, equi-recursively).
4. References: the type-variable, meaningful only beneath a binder.

Python equality on these is syntactic. Parameter names and bound-name spellings
participate, because they are part of what gets displayed. The relation module
provides the equivalences that ignore such things.
"""
from typing import Iterable, Mapping, NamedTuple, Sequence

class NoetherType:
	""" Value objects: the key determines both hash and equality. """
	def visit(self, visitor:"TypeVisitor"): raise NotImplementedError(type(self))

	def __init__(self, *key):
		self._key = key
		self._hash = hash((type(self), key))
	def __hash__(self): return self._hash
	def __eq__(self, other): return type(self) is type(other) and self._key == other._key
	def __repr__(self) -> str:
		it = self.visit(Render())
		assert isinstance(it, str), (it, type(self))
		return it
	def is_error(self): return False

class Boolean(NoetherType):
	def __init__(self): super().__init__()
	def visit(self, visitor:"TypeVisitor"): return visitor.on_boolean(self)

class Number(NoetherType):
	def __init__(self): super().__init__()
	def visit(self, visitor:"TypeVisitor"): return visitor.on_number(self)

class Param(NamedTuple):
	""" The name is carried for diagnostics; relations never compare it. """
	name: str
	type: NoetherType

class Function(NoetherType):
	params: tuple[Param, ...]
	result: NoetherType
	def __init__(self, params:Iterable[Param], result:NoetherType):
		self.params = tuple(Param(*p) for p in params)
		assert all(isinstance(p.type, NoetherType) for p in self.params), self.params
		assert isinstance(result, NoetherType), result
		self.result = result
		super().__init__(self.params, result)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_function(self)
	def arity(self) -> int: return len(self.params)
	def param_types(self) -> tuple[NoetherType, ...]: return tuple(p.type for p in self.params)

class Record(NoetherType):
	"""
	Fields are unique by name. The order of declaration is kept for rendering,
	but the key is order-free so that {a,b} == {b,a}.
	"""
	fields: dict[str, NoetherType]
	def __init__(self, fields:Mapping[str, NoetherType]|Iterable[tuple[str, NoetherType]]):
		pairs = list(fields.items()) if isinstance(fields, Mapping) else list(fields)
		self.fields = dict(pairs)
		assert len(self.fields) == len(pairs), "Duplicate field in %r" % [name for name, _ in pairs]
		assert all(isinstance(t, NoetherType) for t in self.fields.values())
		super().__init__(frozenset(self.fields.items()))
	def visit(self, visitor:"TypeVisitor"): return visitor.on_record(self)
	def field(self, name:str) -> NoetherType|None: return self.fields.get(name)

class TypeVariable(NoetherType):
	def __init__(self, name:str):
		assert isinstance(name, str) and name, name
		self.name = name
		super().__init__(name)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_variable(self)

class TypeAbstraction(NoetherType):
	""" Universal quantification over the bound names, which are distinct within one node. """
	bound_names: tuple[str, ...]
	body: NoetherType
	def __init__(self, bound_names:Sequence[str], body:NoetherType):
		self.bound_names = tuple(bound_names)
		assert len(set(self.bound_names)) == len(self.bound_names), "Repeated type parameter in %r" % (self.bound_names,)
		assert isinstance(body, NoetherType), body
		self.body = body
		super().__init__(self.bound_names, body)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_abstraction(self)
	def arity(self) -> int: return len(self.bound_names)

class Recursive(NoetherType):
	""" Within the body, the bound name denotes this very node. Unfolding is implicit. """
	def __init__(self, bound_name:str, body:NoetherType):
		assert isinstance(bound_name, str) and bound_name, bound_name
		assert isinstance(body, NoetherType), body
		self.bound_name = bound_name
		self.body = body
		super().__init__(bound_name, body)
	def visit(self, visitor:"TypeVisitor"): return visitor.on_recursive(self)

class ErrorType(NoetherType):
	"""
	The type of things that make no sense. Never produced by the engine;
	the driver uses it to keep going after reporting a problem.
	"""
	def __init__(self): super().__init__()
	def visit(self, visitor:"TypeVisitor"): return visitor.on_error_type()
	def is_error(self): return True

ERROR = ErrorType()

###################
# Constructors, named the way the driver thinks about them.

def boolean() -> Boolean: return Boolean()
def number() -> Number: return Number()
def param(name:str, typ:NoetherType) -> Param: return Param(name, typ)
def fn(params:Iterable[Param], result:NoetherType) -> Function: return Function(params, result)
def record(fields) -> Record: return Record(fields)
def type_var(name:str) -> TypeVariable: return TypeVariable(name)
def type_abs(bound_names:Sequence[str], body:NoetherType) -> TypeAbstraction: return TypeAbstraction(bound_names, body)
def rec(bound_name:str, body:NoetherType) -> Recursive: return Recursive(bound_name, body)

def is_function(t:NoetherType) -> bool: return isinstance(t, Function)
def is_record(t:NoetherType) -> bool: return isinstance(t, Record)
def is_recursive(t:NoetherType) -> bool: return isinstance(t, Recursive)
def is_type_abstraction(t:NoetherType) -> bool: return isinstance(t, TypeAbstraction)

###################
#

class TypeVisitor:
	def on_boolean(self, b:Boolean): raise NotImplementedError(type(self))
	def on_number(self, n:Number): raise NotImplementedError(type(self))
	def on_function(self, f:Function): raise NotImplementedError(type(self))
	def on_record(self, r:Record): raise NotImplementedError(type(self))
	def on_variable(self, v:TypeVariable): raise NotImplementedError(type(self))
	def on_abstraction(self, a:TypeAbstraction): raise NotImplementedError(type(self))
	def on_recursive(self, r:Recursive): raise NotImplementedError(type(self))
	def on_error_type(self): raise NotImplementedError(type(self))


class Render(TypeVisitor):
	""" Return a string representation of the type, in roughly the notation people write. """
	def on_boolean(self, b: Boolean): return "boolean"
	def on_number(self, n: Number): return "number"
	def _params(self, params:Sequence[Param]):
		return "(%s)"%(", ".join("%s: %s"%(p.name, p.type.visit(self)) for p in params))
	def on_function(self, f: Function):
		return self._params(f.params)+" => "+f.result.visit(self)
	def on_record(self, r: Record):
		if not r.fields: return "{}"
		return "{ %s }"%("; ".join("%s: %s"%(k, t.visit(self)) for k, t in r.fields.items()))
	def on_variable(self, v: TypeVariable):
		return v.name
	def on_abstraction(self, a: TypeAbstraction):
		body = a.body.visit(self)
		if isinstance(a.body, Function): return "<%s>%s"%(", ".join(a.bound_names), body)
		return "<%s>(%s)"%(", ".join(a.bound_names), body)
	def on_recursive(self, r: Recursive):
		return "μ%s. %s"%(r.bound_name, r.body.visit(self))
	def on_error_type(self):
		return "-/error/-"
