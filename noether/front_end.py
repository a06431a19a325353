"""
Reading term trees that some external parser has already produced.

The expected shape is the tagged-object form: every node is a JSON object with a
"tag" naming its kind, e.g. {"tag": "add", "left": ..., "right": ...}. Terms use
lower-case tags and types use capitalized ones, as in {"tag": "Number"}.
A node may carry "loc": {"start": {"line": L, "column": C}, "end": {...}}.

Nothing here parses program text. That is deliberately somebody else's problem.
"""
import json
from pathlib import Path
from typing import Any, Optional
from . import syntax
from .calculus import (
	NoetherType, Param, boolean, number, fn, record, rec, type_abs, type_var,
)
from .diagnostics import Report

class Yuck(Exception):
	"""
	The first argument will be the name of the pass fraught with error.
	The end-user might not care about this, but it's handy for testing.
	"""
	pass

class MalformedTree(Exception):
	""" args: (where, why) """

class TreeReader:
	"""
	Translate the tagged-object form into term and type objects.
	Dispatch is by tag: a term tagged "add" goes to term_add, a type tagged "Func" to type_Func.
	"""
	def __init__(self):
		self._path = []

	def term(self, node:Any) -> syntax.Term:
		method = self._method("term_", node)
		self._path.append(node["tag"])
		term = method(node)
		self._path.pop()
		return term.located(_loc(node))

	def type(self, node:Any) -> NoetherType:
		method = self._method("type_", node)
		self._path.append(node["tag"])
		typ = method(node)
		self._path.pop()
		return typ

	def _method(self, prefix, node):
		if not isinstance(node, dict) or not isinstance(node.get("tag"), str):
			self.fail("Expected a tagged object, got %r" % (node,))
		try: return getattr(self, prefix + node["tag"])
		except AttributeError: self.fail("Unknown tag %r" % node["tag"])

	def fail(self, why:str):
		raise MalformedTree("/".join(self._path) or "the root", why)

	def field(self, node:dict, key:str):
		try: return node[key]
		except KeyError: self.fail("Missing field %r" % key)

	def name(self, node:dict, key:str) -> str:
		it = self.field(node, key)
		if not isinstance(it, str): self.fail("Field %r should be a name" % key)
		return it

	def names(self, node:dict, key:str) -> list[str]:
		it = self.field(node, key)
		if not (isinstance(it, list) and all(isinstance(n, str) for n in it)):
			self.fail("Field %r should be a list of names" % key)
		if len(set(it)) != len(it): self.fail("Field %r repeats a name" % key)
		return it

	def each(self, node:dict, key:str) -> list:
		it = self.field(node, key)
		if not isinstance(it, list): self.fail("Field %r should be a list" % key)
		return it

	def params(self, node:dict) -> list[Param]:
		return [Param(self.name(p, "name"), self.type(self.field(p, "type"))) for p in self.each(node, "params")]

	def properties(self, node:dict, key:str, reader) -> list:
		props = [(self.name(p, "name"), reader(self.field(p, key))) for p in self.each(node, "props")]
		if len({name for name, _ in props}) != len(props): self.fail("Duplicate property")
		return props

	# Terms:

	@staticmethod
	def term_true(node): return syntax.TrueLit()
	@staticmethod
	def term_false(node): return syntax.FalseLit()
	def term_number(self, node):
		n = self.field(node, "n")
		if isinstance(n, bool) or not isinstance(n, (int, float)): self.fail("Not a number: %r" % (n,))
		return syntax.NumberLit(n)
	def term_add(self, node):
		return syntax.Add(self.term(self.field(node, "left")), self.term(self.field(node, "right")))
	def term_if(self, node):
		return syntax.If(*(self.term(self.field(node, k)) for k in ("cond", "thn", "els")))
	def term_var(self, node): return syntax.Var(self.name(node, "name"))
	def term_func(self, node):
		result_type = self.type(node["retType"]) if node.get("retType") is not None else None
		return syntax.Func(self.params(node), self.term(self.field(node, "body")), result_type)
	def term_call(self, node):
		return syntax.Call(self.term(self.field(node, "func")), [self.term(a) for a in self.each(node, "args")])
	def term_seq(self, node):
		return syntax.Seq(self.term(self.field(node, "body")), self.term(self.field(node, "rest")))
	def term_const(self, node):
		return syntax.Const(self.name(node, "name"), self.term(self.field(node, "init")), self.term(self.field(node, "rest")))
	def term_objectNew(self, node):
		return syntax.ObjectNew(self.properties(node, "term", self.term))
	def term_objectGet(self, node):
		return syntax.ObjectGet(self.term(self.field(node, "obj")), self.name(node, "propName"))
	def term_recFunc(self, node):
		return syntax.RecFunc(
			self.name(node, "funcName"),
			self.params(node),
			self.type(self.field(node, "retType")),
			self.term(self.field(node, "body")),
			self.term(self.field(node, "rest")),
		)
	def term_typeAbs(self, node):
		return syntax.TypeAbs(self.names(node, "typeParams"), self.term(self.field(node, "body")))
	def term_typeApp(self, node):
		return syntax.TypeApp(self.term(self.field(node, "typeAbs")), [self.type(t) for t in self.each(node, "typeArgs")])

	# Types:

	@staticmethod
	def type_Boolean(node): return boolean()
	@staticmethod
	def type_Number(node): return number()
	def type_Func(self, node): return fn(self.params(node), self.type(self.field(node, "retType")))
	def type_Object(self, node): return record(self.properties(node, "type", self.type))
	def type_Rec(self, node): return rec(self.name(node, "name"), self.type(self.field(node, "type")))
	def type_TypeAbs(self, node): return type_abs(self.names(node, "typeParams"), self.type(self.field(node, "type")))
	def type_TypeVar(self, node): return type_var(self.name(node, "name"))

def _loc(node:dict) -> Optional[syntax.Loc]:
	loc = node.get("loc")
	try:
		start, end = loc["start"], loc.get("end") or {}
		return syntax.Loc(int(start["line"]), int(start["column"]), end.get("line"), end.get("column"))
	except (TypeError, KeyError, ValueError, AttributeError):
		return None

def read_term(data:Any) -> syntax.Term:
	return TreeReader().term(data)

def read_type(data:Any) -> NoetherType:
	return TreeReader().type(data)

def load_text(text:str, path:Path, report:Report) -> syntax.Term:
	""" Decode a term tree; on failure, file the reason with the report and raise Yuck. """
	try:
		data = json.loads(text)
	except json.JSONDecodeError as ex:
		report.broken_file(path, ex)
		raise Yuck("load")
	try:
		return read_term(data)
	except MalformedTree as ex:
		report.malformed_node(*ex.args)
		raise Yuck("load")

def load_file(path:Path, report:Report) -> syntax.Term:
	report.info("Loading", path)
	try:
		with open(path, "r", encoding="utf-8") as fh:
			text = fh.read()
	except FileNotFoundError:
		report.no_such_file(path)
		raise Yuck("load")
	except OSError as ex:
		report.broken_file(path, ex)
		raise Yuck("load")
	return load_text(text, path, report)
