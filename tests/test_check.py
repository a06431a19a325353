import unittest
from unittest import mock

from noether.calculus import boolean, number, param, fn, record, type_var, type_abs, rec
from noether.diagnostics import Report, ErrorKind, TooManyIssues
from noether.static.check import TypeChecker
from noether.syntax import (
	TrueLit, FalseLit, NumberLit, Add, If, Var, Func, Call, Seq, Const,
	ObjectNew, ObjectGet, RecFunc, TypeAbs, TypeApp,
)

class Silence(Report):
	def __init__(self, max_issues=30):
		super().__init__(verbose=False, max_issues=max_issues)
		self.complain_to_console = mock.Mock()
	pass

T, U = type_var("T"), type_var("U")

def num_stream():
	return rec("NumStream", record({"num": number(), "rest": fn([], type_var("NumStream"))}))

class CheckerCase(unittest.TestCase):

	def run_checker(self, term):
		report = Silence()
		typ = TypeChecker(report).check_program(term)
		return typ, report

	def ok(self, term, expected):
		typ, report = self.run_checker(term)
		self.assertEqual([], report.kinds())
		self.assertEqual(expected, typ)

	def ng(self, term, *kinds):
		typ, report = self.run_checker(term)
		self.assertEqual(list(kinds), report.kinds())
		return typ

class Basics(CheckerCase):

	def test_literals(self):
		self.ok(TrueLit(), boolean())
		self.ok(FalseLit(), boolean())
		self.ok(NumberLit(42), number())

	def test_add(self):
		self.ok(Add(NumberLit(42), NumberLit(42)), number())
		self.ng(Add(NumberLit(42), TrueLit()), ErrorKind.NUMBER_EXPECTED)

	def test_condition_may_have_any_type(self):
		self.ok(If(NumberLit(42), NumberLit(42), NumberLit(42)), number())

	def test_condition_is_still_checked(self):
		self.ng(If(Add(NumberLit(1), TrueLit()), NumberLit(42), NumberLit(42)), ErrorKind.NUMBER_EXPECTED)

	def test_branches_must_agree(self):
		self.ok(If(TrueLit(), NumberLit(42), NumberLit(42)), number())
		self.ng(If(TrueLit(), NumberLit(42), TrueLit()), ErrorKind.BRANCH_MISMATCH)

	def test_one_mistake_one_complaint(self):
		# The mismatched conditional becomes an error type, which then satisfies the addition.
		self.ng(Add(If(TrueLit(), NumberLit(1), TrueLit()), NumberLit(2)), ErrorKind.BRANCH_MISMATCH)

class Functions(CheckerCase):

	def test_function_parameter(self):
		f_type = fn([param("x", number())], number())
		term = Func([("f", f_type)], Call(Var("f"), [NumberLit(1)]))
		self.ok(term, fn([param("f", f_type)], number()))

	def test_argument_mismatch(self):
		term = Call(Func([("x", number())], NumberLit(42)), [TrueLit()])
		self.ng(term, ErrorKind.ARGUMENT_MISMATCH)

	def test_unknown_variable(self):
		self.ng(Func([("x", number())], Var("y")), ErrorKind.UNKNOWN_VARIABLE)

	def test_wrong_number_of_arguments(self):
		term = Call(Func([("x", number())], NumberLit(42)), [NumberLit(1), NumberLit(2), NumberLit(3)])
		self.ng(term, ErrorKind.WRONG_ARGUMENT_COUNT)

	def test_calling_a_non_function(self):
		self.ng(Call(NumberLit(1), []), ErrorKind.FUNCTION_EXPECTED)

	def test_declared_result_type(self):
		self.ok(Func([("n", number())], NumberLit(42), number()), fn([param("n", number())], number()))
		self.ng(Func([("n", number())], NumberLit(42), boolean()), ErrorKind.WRONG_RETURN_TYPE)

class Definitions(CheckerCase):

	def test_const(self):
		self.ok(Const("x", NumberLit(42), Var("x")), number())

	def test_later_definition_shadows(self):
		self.ok(Const("x", NumberLit(42), Const("x", TrueLit(), Var("x"))), boolean())

	def test_seq_takes_the_type_of_the_rest(self):
		self.ok(Seq(NumberLit(1), TrueLit()), boolean())

	def test_defined_functions(self):
		add = Func([("x", number()), ("y", number())], Add(Var("x"), Var("y")))
		select = Func([("b", boolean()), ("x", number()), ("y", number())], If(Var("b"), Var("x"), Var("y")))
		term = Const("add", add, Const("select", select,
			Const("x", Call(Var("add"), [NumberLit(1), Call(Var("add"), [NumberLit(2), NumberLit(3)])]),
			Const("y", Call(Var("select"), [TrueLit(), Var("x"), Var("x")]),
			Var("y")))))
		self.ok(term, number())

	def test_self_calling_function(self):
		f = RecFunc("f", [("x", number())], number(), Call(Var("f"), [Var("x")]), Var("f"))
		self.ok(f, fn([param("x", number())], number()))

	def test_self_calling_function_with_wrong_result(self):
		f = RecFunc("f", [("x", number())], boolean(), Var("x"), Var("f"))
		typ = self.ng(f, ErrorKind.WRONG_RETURN_TYPE)
		self.assertEqual(fn([param("x", number())], boolean()), typ)

class Objects(CheckerCase):

	def test_object_literal(self):
		self.ok(ObjectNew([("a", NumberLit(42)), ("b", TrueLit())]), record({"a": number(), "b": boolean()}))

	def test_nested_object(self):
		term = ObjectNew([("a", NumberLit(42)), ("b", ObjectNew([("c", TrueLit())]))])
		self.ok(term, record({"a": number(), "b": record({"c": boolean()})}))

	def test_exact_argument(self):
		shape = record({"a": number(), "b": boolean()})
		term = Const("func", Func([("obj", shape)], Var("obj")),
			Call(Var("func"), [ObjectNew([("a", NumberLit(42)), ("b", TrueLit())])]))
		self.ok(term, shape)

	def test_mismatched_property(self):
		shape = record({"a": number(), "b": boolean()})
		term = Const("func", Func([("obj", shape)], Var("obj")),
			Call(Var("func"), [ObjectNew([("a", NumberLit(42)), ("b", NumberLit(42))])]))
		self.ng(term, ErrorKind.ARGUMENT_MISMATCH)

	def test_property_access(self):
		obj = ObjectNew([("a", NumberLit(42)), ("b", TrueLit())])
		self.ok(Const("obj", obj, ObjectGet(Var("obj"), "a")), number())
		self.ng(Const("obj", obj, ObjectGet(Var("obj"), "c")), ErrorKind.UNKNOWN_PROPERTY)

	def test_property_of_non_object(self):
		self.ng(Const("obj", NumberLit(42), ObjectGet(Var("obj"), "a")), ErrorKind.OBJECT_EXPECTED)

	def test_recursive_function_builds_object(self):
		shape = record({"name": boolean(), "age": number()})
		body = ObjectNew([("name", Var("name")), ("age", Var("age"))])
		term = RecFunc("createPerson", [("name", boolean()), ("age", number())], shape, body,
			Call(Var("createPerson"), [TrueLit(), NumberLit(30)]))
		self.ok(term, shape)

class Subtypes(CheckerCase):

	def test_wider_argument(self):
		term = Const("f", Func([("x", record({"foo": number()}))], ObjectGet(Var("x"), "foo")),
			Const("x", ObjectNew([("foo", NumberLit(1)), ("bar", TrueLit())]),
			Call(Var("f"), [Var("x")])))
		self.ok(term, number())

	def test_covariant_result(self):
		foo_bar = record({"foo": number(), "bar": boolean()})
		term = Const("f", Func([("x", fn([], foo_bar))], Call(Var("x"), [])),
			Const("g", Func([], ObjectNew([("foo", NumberLit(42)), ("bar", TrueLit()), ("baz", TrueLit())])),
			Call(Var("f"), [Var("g")])))
		self.ok(term, foo_bar)

	def test_contravariant_parameter(self):
		foo_bar = record({"foo": number(), "bar": boolean()})
		term = Const("f", Func([("x", fn([param("x", foo_bar)], number()))],
				Call(Var("x"), [ObjectNew([("foo", NumberLit(1)), ("bar", TrueLit())])])),
			Const("g", Func([("x", record({"foo": number()}))], ObjectGet(Var("x"), "foo")),
			Call(Var("f"), [Var("g")])))
		self.ok(term, number())

	def test_contravariance_rejects_narrower_parameter(self):
		foo_bar = record({"foo": number(), "bar": boolean()})
		term = Const("f", Func([("x", fn([param("x", record({"foo": number()}))], number()))],
				Call(Var("x"), [ObjectNew([("foo", NumberLit(1))])])),
			Const("g", Func([("x", foo_bar)], ObjectGet(Var("x"), "foo")),
			Call(Var("f"), [Var("g")])))
		self.ng(term, ErrorKind.ARGUMENT_MISMATCH)

class RecursiveTypes(CheckerCase):

	def test_number_stream(self):
		rest = Func([], Call(Var("numbers"), [Add(Var("n"), NumberLit(1))]))
		body = ObjectNew([("num", Var("n")), ("rest", rest)])
		term = RecFunc("numbers", [("n", number())], num_stream(), body,
			Const("ns1", Call(Var("numbers"), [NumberLit(1)]),
			Const("ns2", Call(ObjectGet(Var("ns1"), "rest"), []),
			Const("ns3", Call(ObjectGet(Var("ns2"), "rest"), []),
			ObjectGet(Var("ns3"), "num")))))
		self.ok(term, number())

	def test_stream_with_wrong_body(self):
		body = ObjectNew([("num", Var("n")), ("rest", Func([], Var("n")))])
		term = RecFunc("numbers", [("n", number())], num_stream(), body, Var("numbers"))
		self.ng(term, ErrorKind.WRONG_RETURN_TYPE)

class Generics(CheckerCase):

	def select(self):
		body = If(Var("b"), Var("x"), Var("y"))
		return TypeAbs(["T"], Func([("b", boolean()), ("x", T), ("y", T)], body))

	def test_generic_function(self):
		term = Const("f", TypeAbs(["T"], Func([("x", T)], Var("x"))), Var("f"))
		self.ok(term, type_abs(["T"], fn([param("x", T)], T)))

	def test_type_application(self):
		term = Const("f", TypeAbs(["T"], Func([("x", T)], Var("x"))), TypeApp(Var("f"), [number()]))
		self.ok(term, fn([param("x", number())], number()))

	def test_instantiate_differently(self):
		for typ, args in [
			(number(), [TrueLit(), NumberLit(1), NumberLit(2)]),
			(boolean(), [TrueLit(), TrueLit(), FalseLit()]),
		]:
			with self.subTest(typ):
				term = Const("select", self.select(), Call(TypeApp(Var("select"), [typ]), args))
				self.ok(term, typ)

	def test_instantiated_argument_mismatch(self):
		term = Const("select", self.select(), Call(TypeApp(Var("select"), [number()]), [TrueLit(), TrueLit(), NumberLit(2)]))
		self.ng(term, ErrorKind.ARGUMENT_MISMATCH)

	def test_shadowing_type_parameter(self):
		inner = type_abs(["T"], fn([param("x", T)], boolean()))
		foo = TypeAbs(["T"], Func([("arg1", T), ("arg2", inner)], TrueLit()))
		term = Const("foo", foo, TypeApp(Var("foo"), [number()]))
		self.ok(term, fn([param("arg1", number()), param("arg2", inner)], boolean()))

	def test_outer_type_variable_is_not_captured(self):
		foo = TypeAbs(["T"], Func([("arg1", T), ("arg2", type_abs(["U"], fn([param("x", T), param("y", U)], boolean())))], TrueLit()))
		bar = TypeAbs(["U"], Func([], TypeApp(Var("foo"), [U])))
		term = Const("foo", foo, Const("bar", bar, Var("bar")))
		inner = type_abs(["U@1"], fn([param("x", U), param("y", type_var("U@1"))], boolean()))
		self.ok(term, type_abs(["U"], fn([], fn([param("arg1", U), param("arg2", inner)], boolean()))))

	def test_type_application_needs_type_abstraction(self):
		self.ng(TypeApp(NumberLit(1), [number()]), ErrorKind.TYPE_ABSTRACTION_EXPECTED)

	def test_wrong_number_of_type_arguments(self):
		term = Const("f", TypeAbs(["T"], Func([("x", T)], Var("x"))), TypeApp(Var("f"), [number(), boolean()]))
		self.ng(term, ErrorKind.WRONG_TYPE_ARGUMENT_COUNT)

	def test_unknown_type_variable(self):
		self.ng(Func([("x", T)], Var("x")), ErrorKind.UNKNOWN_TYPE_VARIABLE)
		self.ng(TypeAbs(["T"], Func([("x", U)], Var("x"))), ErrorKind.UNKNOWN_TYPE_VARIABLE)

	def test_type_parameter_in_declared_result(self):
		term = TypeAbs(["T"], Func([("x", T)], Var("x"), T))
		self.ok(term, type_abs(["T"], fn([param("x", T)], T)))

class GivingUp(unittest.TestCase):

	def test_too_many_issues(self):
		report = Silence(max_issues=2)
		term = Seq(Var("a"), Seq(Var("b"), Var("c")))
		with self.assertRaises(TooManyIssues):
			TypeChecker(report).check_program(term)
		self.assertEqual([ErrorKind.UNKNOWN_VARIABLE] * 2, report.kinds())

if __name__ == '__main__':
	unittest.main()
