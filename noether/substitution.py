"""
Substitution of types for type-variables, with hygiene.

A binder that would capture one of the replacement's free variables gets renamed
before the substitution proceeds beneath it. Fresh names come from an explicit
allocator so that the renaming is predictable: the first clash over "U" yields
"U@1", the next yields "U@2", and so forth. The driver owns one allocator per
program, so no two renamings within a program collide.

Unfolding a recursive type is also a substitution: the bound name gets replaced
by the recursive node itself.
"""
from typing import Optional, Sequence
from boozetools.support.foundation import Visitor
from .calculus import (
	NoetherType, Param, Function, Record, TypeVariable, TypeAbstraction, Recursive,
)

class FreshNames:
	""" Counter-backed generator of names that have not been used yet. """
	def __init__(self, start:int=1):
		self._next = start

	def fresh(self, name:str, avoid) -> str:
		base = name.partition("@")[0]
		while True:
			candidate = "%s@%d" % (base, self._next)
			self._next += 1
			if candidate not in avoid: return candidate

class FreeVariables(Visitor):
	"""
	The names of type-variables not bound within a type.
	Types never change, so each node remembers its answer. Unfolding shares
	most of its structure with the type unfolded, so this keeps repeated
	questions about big unfoldings cheap.
	"""
	def free(self, t:NoetherType) -> frozenset[str]:
		try: return t._free_names
		except AttributeError: pass
		t._free_names = found = frozenset(self.visit(t))
		return found

	@staticmethod
	def visit_Boolean(t): return ()
	@staticmethod
	def visit_Number(t): return ()
	@staticmethod
	def visit_ErrorType(t): return ()

	def visit_Function(self, t:Function):
		found = set(self.free(t.result))
		for p in t.params: found.update(self.free(p.type))
		return found

	def visit_Record(self, t:Record):
		return set().union(*map(self.free, t.fields.values()))

	@staticmethod
	def visit_TypeVariable(t:TypeVariable): return (t.name,)

	def visit_TypeAbstraction(self, t:TypeAbstraction):
		return self.free(t.body).difference(t.bound_names)

	def visit_Recursive(self, t:Recursive):
		return self.free(t.body).difference([t.bound_name])

_FREE = FreeVariables()

def free_type_variables(t:NoetherType) -> frozenset[str]:
	return _FREE.free(t)

class Substitution(Visitor):
	""" Replace free occurrences of one type-variable. Builds new nodes; never mutates. """
	def __init__(self, var_name:str, replacement:NoetherType, fresh:FreshNames):
		self._name = var_name
		self._replacement = replacement
		self._fresh = fresh
		self._capturable = free_type_variables(replacement)

	def visit_Boolean(self, t): return t
	def visit_Number(self, t): return t
	def visit_ErrorType(self, t): return t

	def visit_Function(self, t:Function):
		params = [Param(p.name, self.visit(p.type)) for p in t.params]
		return Function(params, self.visit(t.result))

	def visit_Record(self, t:Record):
		return Record((name, self.visit(typ)) for name, typ in t.fields.items())

	def visit_TypeVariable(self, t:TypeVariable):
		return self._replacement if t.name == self._name else t

	def visit_TypeAbstraction(self, t:TypeAbstraction):
		if self._name in t.bound_names or self._name not in free_type_variables(t.body):
			return t
		bound_names, body = self._hygiene(t.bound_names, t.body)
		return TypeAbstraction(bound_names, self.visit(body))

	def visit_Recursive(self, t:Recursive):
		if t.bound_name == self._name or self._name not in free_type_variables(t.body):
			return t
		(bound_name,), body = self._hygiene((t.bound_name,), t.body)
		return Recursive(bound_name, self.visit(body))

	def _hygiene(self, bound_names:tuple[str, ...], body:NoetherType):
		""" Rename those binders which would capture a free variable of the replacement. """
		clashes = [n for n in bound_names if n in self._capturable]
		if not clashes: return bound_names, body
		avoid = set(self._capturable) | free_type_variables(body) | set(bound_names) | {self._name}
		renaming = {}
		for old in clashes:
			renaming[old] = new = self._fresh.fresh(old, avoid)
			avoid.add(new)
		for old, new in renaming.items():
			body = Substitution(old, TypeVariable(new), self._fresh).visit(body)
		return tuple(renaming.get(n, n) for n in bound_names), body

def substitute(target:NoetherType, var_name:str, replacement:NoetherType, fresh:Optional[FreshNames]=None) -> NoetherType:
	assert isinstance(target, NoetherType), target
	assert isinstance(replacement, NoetherType), replacement
	return Substitution(var_name, replacement, fresh or FreshNames()).visit(target)

def substitute_all(target:NoetherType, var_names:Sequence[str], replacements:Sequence[NoetherType], fresh:Optional[FreshNames]=None) -> NoetherType:
	"""
	Simultaneous substitution, as for instantiating every parameter of a type-abstraction at once.
	When some replacement mentions one of the names being replaced, going one at a time would
	substitute into the replacement as well, so the names are first moved out of the way.
	"""
	assert len(var_names) == len(replacements), (var_names, replacements)
	fresh = fresh or FreshNames()
	mentioned = set()
	for r in replacements: mentioned |= free_type_variables(r)
	if mentioned.isdisjoint(var_names):
		for name, r in zip(var_names, replacements):
			target = substitute(target, name, r, fresh)
		return target
	avoid = mentioned | set(var_names) | free_type_variables(target)
	placeholders = []
	for name in var_names:
		placeholders.append(fresh.fresh(name, avoid))
		avoid.add(placeholders[-1])
	for name, p in zip(var_names, placeholders):
		target = substitute(target, name, TypeVariable(p), fresh)
	for p, r in zip(placeholders, replacements):
		target = substitute(target, p, r, fresh)
	return target

def _is_contractive(t:Recursive) -> bool:
	names = set()
	while isinstance(t, Recursive):
		names.add(t.bound_name)
		t = t.body
	return not (isinstance(t, TypeVariable) and t.name in names)

def unfold(t:NoetherType, fresh:Optional[FreshNames]=None) -> NoetherType:
	""" Expose the first constructor beneath any recursive binders. Other types pass through. """
	if isinstance(t, Recursive):
		assert _is_contractive(t), "Non-contractive recursive type: %r" % t
		fresh = fresh or FreshNames()
		while isinstance(t, Recursive):
			t = substitute(t.body, t.bound_name, t, fresh)
	return t
