"""
Deciding when two types are the same, and when one will serve for another.

There are three questions one can ask:

A. Equivalence over open types: Are these the same, given a correspondence between
   the type-variables bound around the left one and those bound around the right one?
   Recursive types get no special treatment here: each binder pairs with its partner.
   This is what tells us that <A>(x:A)=>A and <B>(x:B)=>B are the same type.

B. Equi-recursive equivalence: As above, but a recursive type means its own unfolding.
   Two such types may be infinite, but they are regular, so we can get away with
   assuming a pair equal while we check their unfoldings. That assumption is the
   "seen pair". Before expanding any pair we ask whether it (or a renaming of it)
   has been assumed already.

C. Subtyping: Like B, but records may have extra fields on the subtype side and
   functions relate contravariantly in their parameters. The seen pairs are now
   assumptions of the form sub <: sup.

All three dispatch on the right-hand type, and fail fast if the left differs in kind.
Internally, a comparison answers with the seen pairs as they stand after success,
or None for failure. Threading the answer from one sibling into the next means
no pair ever gets expanded twice within one top-level call. A single failure fails
the whole call, so no answer ever rests on an assumption that got refuted.

Meeting a type-variable that nothing binds is a defect in whoever built the type,
so that is an assertion rather than an answer.
"""
from typing import Iterable, Mapping, Optional, Union
from boozetools.support.foundation import Visitor
from .calculus import (
	NoetherType, Boolean, Number, Function, Record, TypeVariable, TypeAbstraction, Recursive,
)
from .environment import Bindings, EMPTY_BINDINGS, SeenPairs, NOTHING_SEEN
from .substitution import FreshNames, free_type_variables, unfold

BindingMap = Union[Bindings, Mapping[str, str]]
Outcome = Optional[SeenPairs]

def _as_bindings(binding_map:BindingMap) -> Bindings:
	if isinstance(binding_map, Bindings): return binding_map
	return EMPTY_BINDINGS.extend(binding_map.items())

def _context(a:NoetherType, b:NoetherType, bindings:Bindings) -> tuple:
	return bindings.restricted(free_type_variables(a), free_type_variables(b))

class Equivalence(Visitor):
	"""
	In "strict" mode, an unbound variable on the left is a defect.
	Otherwise, names unbound on both sides are taken to be free, and match by spelling.
	In "coinductive" mode, recursive types get unfolded and seen pairs get consulted.
	"""
	def __init__(self, *, strict:bool, coinductive:bool, fresh:FreshNames=None):
		self._strict = strict
		self._coinductive = coinductive
		self._fresh = fresh or FreshNames()

	def relate(self, a:NoetherType, b:NoetherType, bindings:Bindings, seen:SeenPairs) -> Outcome:
		if a.is_error() or b.is_error(): return seen
		if self._coinductive:
			context = _context(a, b, bindings)
			if has_seen(a, b, context, seen): return seen
			if isinstance(a, Recursive):
				return self.relate(unfold(a, self._fresh), b, bindings, seen.also(a, b, context))
			if isinstance(b, Recursive):
				return self.relate(a, unfold(b, self._fresh), bindings, seen.also(a, b, context))
		return self.visit(b, a, bindings, seen)

	@staticmethod
	def visit_Boolean(b, a, bindings, seen): return seen if isinstance(a, Boolean) else None

	@staticmethod
	def visit_Number(b, a, bindings, seen): return seen if isinstance(a, Number) else None

	def visit_Function(self, b:Function, a, bindings, seen):
		if not isinstance(a, Function) or a.arity() != b.arity():
			return None
		for pa, pb in zip(a.param_types(), b.param_types()):
			seen = self.relate(pa, pb, bindings, seen)
			if seen is None: return None
		return self.relate(a.result, b.result, bindings, seen)

	def visit_Record(self, b:Record, a, bindings, seen):
		if not isinstance(a, Record) or len(a.fields) != len(b.fields):
			return None
		for name, tb in b.fields.items():
			ta = a.field(name)
			if ta is None: return None
			seen = self.relate(ta, tb, bindings, seen)
			if seen is None: return None
		return seen

	def visit_TypeAbstraction(self, b:TypeAbstraction, a, bindings, seen):
		if not isinstance(a, TypeAbstraction) or a.arity() != b.arity():
			return None
		inner = bindings.extend(zip(a.bound_names, b.bound_names))
		return self.relate(a.body, b.body, inner, seen)

	def visit_Recursive(self, b:Recursive, a, bindings, seen):
		# Only reachable when not unfolding: the binders correspond like a one-name abstraction.
		if not isinstance(a, Recursive):
			return None
		inner = bindings.extend([(a.bound_name, b.bound_name)])
		return self.relate(a.body, b.body, inner, seen)

	def visit_TypeVariable(self, b:TypeVariable, a, bindings, seen):
		if not isinstance(a, TypeVariable):
			return None
		if bindings.binds_left(a.name):
			return seen if bindings.agree(a.name, b.name) else None
		assert not self._strict, "unknown type variable: %s" % a.name
		return seen if a.name == b.name and not bindings.binds_right(b.name) else None

	@staticmethod
	def visit_ErrorType(b, a, bindings, seen): return seen


_ALPHA = Equivalence(strict=False, coinductive=False)

def alpha_equivalent(a:NoetherType, b:NoetherType) -> bool:
	""" Same up to the spelling of bound names. Free names must match exactly. """
	return a == b or _ALPHA.relate(a, b, EMPTY_BINDINGS, NOTHING_SEEN) is not None

def has_seen(a:NoetherType, b:NoetherType, context:tuple, seen:SeenPairs) -> bool:
	"""
	A recorded pair matches if it is a renaming of (a, b) and its free type-variables
	meant the same then as they do now. Free names match by spelling, so the contexts
	compare directly.
	"""
	if (a, b, context) in seen or (a, b, None) in seen: return True
	for seen_a, seen_b, seen_context in seen:
		if seen_context in (None, context) and alpha_equivalent(seen_a, a) and alpha_equivalent(seen_b, b):
			return True
	return False


class Subtyping(Visitor):
	""" The coinductive subtype relation, dispatched on the supertype. """
	def __init__(self, fresh:FreshNames=None):
		self._fresh = fresh or FreshNames()
		self._equivalence = Equivalence(strict=True, coinductive=True, fresh=self._fresh)

	def relate(self, sub:NoetherType, sup:NoetherType, bindings:Bindings, seen:SeenPairs) -> Outcome:
		if sub.is_error() or sup.is_error(): return seen
		context = _context(sub, sup, bindings)
		if has_seen(sub, sup, context, seen): return seen
		if isinstance(sub, Recursive):
			return self.relate(unfold(sub, self._fresh), sup, bindings, seen.also(sub, sup, context))
		if isinstance(sup, Recursive):
			return self.relate(sub, unfold(sup, self._fresh), bindings, seen.also(sub, sup, context))
		return self.visit(sup, sub, bindings, seen)

	@staticmethod
	def visit_Boolean(sup, sub, bindings, seen): return seen if isinstance(sub, Boolean) else None

	@staticmethod
	def visit_Number(sup, sub, bindings, seen): return seen if isinstance(sub, Number) else None

	def visit_Function(self, sup:Function, sub, bindings, seen):
		if not isinstance(sub, Function) or sub.arity() != sup.arity():
			return None
		seen = self.relate(sub.result, sup.result, bindings, seen)
		for p_sub, p_sup in zip(sub.param_types(), sup.param_types()):
			if seen is None: return None
			# Contravariant: the subtype must accept whatever the supertype's callers supply.
			seen = self.relate(p_sup, p_sub, bindings, seen)
		return seen

	def visit_Record(self, sup:Record, sub, bindings, seen):
		if not isinstance(sub, Record):
			return None
		for name, t_sup in sup.fields.items():
			t_sub = sub.field(name)
			if t_sub is None: return None
			seen = self.relate(t_sub, t_sup, bindings, seen)
			if seen is None: return None
		return seen

	def _equivalent(self, sub, sup, bindings, seen):
		# Equality assumptions are not subtype assumptions, so the two never share a set.
		return seen if self._equivalence.relate(sub, sup, bindings, NOTHING_SEEN) is not None else None

	def visit_TypeVariable(self, sup, sub, bindings, seen):
		return self._equivalent(sub, sup, bindings, seen)

	def visit_TypeAbstraction(self, sup, sub, bindings, seen):
		return self._equivalent(sub, sup, bindings, seen)

	@staticmethod
	def visit_ErrorType(sup, sub, bindings, seen): return seen


def type_equivalent(a:NoetherType, b:NoetherType, binding_map:BindingMap=EMPTY_BINDINGS) -> bool:
	""" Operation A: equivalence under a correspondence of bound names, without unfolding. """
	relation = Equivalence(strict=True, coinductive=False)
	return relation.relate(a, b, _as_bindings(binding_map), NOTHING_SEEN) is not None

def type_equivalent_rec(a:NoetherType, b:NoetherType, seen:SeenPairs=NOTHING_SEEN, scope:Iterable[str]=()) -> bool:
	"""
	Operation B: equi-recursive equivalence.
	The scope names type-variables bound outside both types; these stand for themselves.
	"""
	relation = Equivalence(strict=True, coinductive=True)
	return relation.relate(a, b, Bindings.identity(scope), seen) is not None

def is_subtype(sub:NoetherType, sup:NoetherType, scope:Iterable[str]=()) -> bool:
	""" Operation C: may a value of type "sub" be used where "sup" is expected? """
	return Subtyping().relate(sub, sup, Bindings.identity(scope), NOTHING_SEEN) is not None
