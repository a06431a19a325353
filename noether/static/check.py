"""
The syntax-directed type-checker.

It walks a term tree threading two things downward: the types of the variables
in scope, and the list of type-variable names in scope. Wherever two types must
agree, it asks the relation engine, and interprets a "no" as a particular kind
of type error.

* Call arguments need only be subtypes of the declared parameters.
* Declared and produced results must be equivalent, as must the branches of a conditional.

A type error gets reported and then stands in as the ERROR type, which relates to
everything. That way one mistake makes one complaint rather than a cascade.
"""
# ----------------------------------------------------------------

from typing import Sequence
from boozetools.support.foundation import Visitor
from .. import syntax
from ..calculus import (
	NoetherType, Param, Function, Record, TypeAbstraction,
	ERROR, boolean, number,
)
from ..diagnostics import Report
from ..environment import TypeEnv
from ..relation import is_subtype, type_equivalent_rec
from ..substitution import FreshNames, free_type_variables, substitute_all, unfold

Scope = tuple[str, ...]

class TypeChecker(Visitor):
	_fresh: FreshNames

	def __init__(self, report: Report):
		self._report = report

	def _reset(self):
		self._fresh = FreshNames()

	def check_program(self, term:syntax.Term, env:TypeEnv=None) -> NoetherType:
		self._reset()
		self._report.info("Type-Check", term)
		typ = self.check(term, env or TypeEnv(), ())
		self._report.info("Program type:", typ)
		return typ

	def check(self, term:syntax.Term, env:TypeEnv, scope:Scope) -> NoetherType:
		typ = self.visit(term, env, scope)
		assert isinstance(typ, NoetherType), (term, typ)
		return typ

	def annotation(self, site:syntax.Term, typ:NoetherType, scope:Scope) -> NoetherType:
		""" Every type-variable an annotation mentions must be in scope. """
		unbound = sorted(free_type_variables(typ).difference(scope))
		for name in unbound:
			self._report.unknown_type_variable(site, name)
		return ERROR if unbound else typ

	def formals(self, site:syntax.Term, params:Sequence[Param], scope:Scope) -> list[Param]:
		return [Param(p.name, self.annotation(site, p.type, scope)) for p in params]

	def unfold(self, typ:NoetherType) -> NoetherType:
		return unfold(typ, self._fresh)

	@staticmethod
	def visit_TrueLit(term, env, scope): return boolean()

	@staticmethod
	def visit_FalseLit(term, env, scope): return boolean()

	@staticmethod
	def visit_NumberLit(term, env, scope): return number()

	def visit_Add(self, term:syntax.Add, env, scope):
		for operand in term.left, term.right:
			typ = self.unfold(self.check(operand, env, scope))
			if not (typ.is_error() or typ == number()):
				self._report.number_expected(operand, typ)
		return number()

	def visit_If(self, term:syntax.If, env, scope):
		# The condition may have any type at all, but it still has to check.
		self.check(term.cond, env, scope)
		then_type = self.check(term.then, env, scope)
		else_type = self.check(term.otherwise, env, scope)
		if type_equivalent_rec(then_type, else_type, scope=scope):
			return then_type
		self._report.branch_mismatch(term, then_type, else_type)
		return ERROR

	def visit_Var(self, term:syntax.Var, env, scope):
		if term.name in env:
			return env[term.name]
		self._report.unknown_variable(term, term.name)
		return ERROR

	def visit_Func(self, term:syntax.Func, env, scope):
		params = self.formals(term, term.params, scope)
		body_type = self.check(term.body, env.define_all(params), scope)
		if term.result_type is None:
			return Function(params, body_type)
		result_type = self.annotation(term, term.result_type, scope)
		self._expect_result(term, result_type, body_type, scope)
		return Function(params, result_type)

	def _expect_result(self, term, declared:NoetherType, produced:NoetherType, scope:Scope):
		if not type_equivalent_rec(declared, produced, scope=scope):
			self._report.bad_result(term, declared, produced)

	def visit_Call(self, term:syntax.Call, env, scope):
		fn_type = self.unfold(self.check(term.func, env, scope))
		arg_types = [self.check(a, env, scope) for a in term.args]
		if fn_type.is_error():
			return ERROR
		if not isinstance(fn_type, Function):
			self._report.function_expected(term.func, fn_type)
			return ERROR
		if fn_type.arity() != len(arg_types):
			self._report.wrong_arity(term, fn_type.arity(), len(arg_types))
			return ERROR
		for arg, got, need in zip(term.args, arg_types, fn_type.param_types()):
			if not is_subtype(got, need, scope=scope):
				self._report.bad_argument(arg, need, got)
		return fn_type.result

	def visit_Seq(self, term:syntax.Seq, env, scope):
		self.check(term.body, env, scope)
		return self.check(term.rest, env, scope)

	def visit_Const(self, term:syntax.Const, env, scope):
		init_type = self.check(term.init, env, scope)
		self._report.chatter("  %s : %s" % (term.name, init_type))
		return self.check(term.rest, env.define(term.name, init_type), scope)

	def visit_ObjectNew(self, term:syntax.ObjectNew, env, scope):
		return Record((name, self.check(value, env, scope)) for name, value in term.props)

	def visit_ObjectGet(self, term:syntax.ObjectGet, env, scope):
		obj_type = self.unfold(self.check(term.obj, env, scope))
		if obj_type.is_error():
			return ERROR
		if not isinstance(obj_type, Record):
			self._report.object_expected(term.obj, obj_type)
			return ERROR
		prop_type = obj_type.field(term.prop_name)
		if prop_type is None:
			self._report.unknown_property(term, term.prop_name, obj_type)
			return ERROR
		return prop_type

	def visit_RecFunc(self, term:syntax.RecFunc, env, scope):
		params = self.formals(term, term.params, scope)
		result_type = self.annotation(term, term.result_type, scope)
		fn_type = Function(params, result_type)
		# Within the body, both the function itself and its parameters are visible.
		inner = env.define(term.name, fn_type).define_all(params)
		body_type = self.check(term.body, inner, scope)
		self._expect_result(term, result_type, body_type, scope)
		self._report.chatter("  %s : %s" % (term.name, fn_type))
		return self.check(term.rest, env.define(term.name, fn_type), scope)

	def visit_TypeAbs(self, term:syntax.TypeAbs, env, scope):
		body_type = self.check(term.body, env, scope + term.type_params)
		return TypeAbstraction(term.type_params, body_type)

	def visit_TypeApp(self, term:syntax.TypeApp, env, scope):
		generic = self.check(term.target, env, scope)
		type_args = [self.annotation(term, t, scope) for t in term.type_args]
		if generic.is_error():
			return ERROR
		if not isinstance(generic, TypeAbstraction):
			self._report.type_abstraction_expected(term.target, generic)
			return ERROR
		if generic.arity() != len(type_args):
			self._report.wrong_type_arity(term, generic.arity(), len(type_args))
			return ERROR
		return substitute_all(generic.body, generic.bound_names, type_args, self._fresh)

def check_program(term:syntax.Term, report:Report) -> NoetherType:
	return TypeChecker(report).check_program(term)
