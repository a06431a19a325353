"""
Environments for the type-relation engine and its driver.

All of these are values: extending one produces a new one,
and the old one goes on meaning exactly what it meant before.
That way a recursive walk can hand its callee an extended
environment without worrying what the callee does with it.
"""
from typing import Iterable, Iterator, Optional
from .calculus import NoetherType

class Bindings:
	"""
	Correspondence between the bound names of one type and those of another,
	as established by walking down through binders in parallel.

	It's bidirectional: a variable on the left matches a variable on the right
	only if each is the other's partner. Otherwise an inner binder on one side
	could silently capture a reference to an outer binder on the other.
	"""
	_forward: dict[str, str]
	_backward: dict[str, str]

	def __init__(self, forward:Optional[dict[str, str]]=None, backward:Optional[dict[str, str]]=None):
		self._forward = forward or {}
		self._backward = backward or {}

	@staticmethod
	def identity(names:Iterable[str]) -> "Bindings":
		""" Names already in scope on both sides mean themselves. """
		same = {n:n for n in names}
		return Bindings(same, dict(same))

	def extend(self, pairs:Iterable[tuple[str, str]]) -> "Bindings":
		forward, backward = dict(self._forward), dict(self._backward)
		for left, right in pairs:
			forward[left] = right
			backward[right] = left
		return Bindings(forward, backward)

	def binds_left(self, name:str) -> bool: return name in self._forward
	def binds_right(self, name:str) -> bool: return name in self._backward
	def partner(self, name:str) -> Optional[str]: return self._forward.get(name)

	def agree(self, left:str, right:str) -> bool:
		return self._forward.get(left) == right and self._backward.get(right) == left

	def restricted(self, left_names:Iterable[str], right_names:Iterable[str]) -> tuple:
		""" Just the part of the correspondence that touches the given names, in hashable form. """
		return (
			tuple(sorted((n, self._forward.get(n)) for n in left_names)),
			tuple(sorted((n, self._backward.get(n)) for n in right_names)),
		)

	def __repr__(self): return "<Bindings %r>" % self._forward

EMPTY_BINDINGS = Bindings()

Assumption = tuple[NoetherType, NoetherType, Optional[tuple]]

def _assumption(left:NoetherType, right:NoetherType, context:Optional[tuple]=None) -> Assumption:
	return left, right, context

class SeenPairs:
	"""
	The pairs of types assumed related during one top-level comparison.

	Each pair carries the part of the binding correspondence which gave its free
	type-variables their meaning at the time, or None for a pair the caller assumes
	outright. Append-only, in the sense that "also" returns a longer copy. A
	successful comparison hands back the longer copy, so the next sibling branch
	starts out knowing everything its elder siblings assumed.
	"""
	_pairs: tuple[Assumption, ...]
	_index: frozenset

	def __init__(self, pairs=()):
		self._pairs = tuple(_assumption(*p) for p in pairs)
		self._index = frozenset(self._pairs)
	def also(self, left:NoetherType, right:NoetherType, context:Optional[tuple]=None) -> "SeenPairs":
		entry = _assumption(left, right, context)
		if entry in self._index: return self
		return SeenPairs(self._pairs + (entry,))
	def __contains__(self, entry:Assumption) -> bool: return entry in self._index
	def __iter__(self) -> Iterator[Assumption]: return iter(self._pairs)
	def __len__(self): return len(self._pairs)
	def __repr__(self): return "<SeenPairs %d>" % len(self._pairs)

NOTHING_SEEN = SeenPairs()

class TypeEnv:
	""" What the driver knows about the types of variables in scope. Copy-on-define. """
	_bindings: dict[str, NoetherType]

	def __init__(self, bindings:Optional[dict[str, NoetherType]]=None):
		self._bindings = bindings or {}

	def __contains__(self, name:str) -> bool: return name in self._bindings
	def __getitem__(self, name:str) -> NoetherType: return self._bindings[name]

	def define(self, name:str, typ:NoetherType) -> "TypeEnv":
		return self.define_all([(name, typ)])

	def define_all(self, pairs:Iterable[tuple[str, NoetherType]]) -> "TypeEnv":
		bindings = dict(self._bindings)
		bindings.update(pairs)
		return TypeEnv(bindings)

	def items(self): return self._bindings.items()
