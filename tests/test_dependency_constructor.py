# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for dependency constructor synthesis and its availability check."""

import pytest

from csharp_refactor.dependency_constructor import (
    collect_candidates,
    derive_parameter_name,
    find_constructor,
    find_parameter_collisions,
    is_applicable,
    synthesize,
)
from csharp_refactor.protocol import CancellationToken
from csharp_refactor.syntax.nodes import (
    AssignmentStatement,
    ClassNode,
    ConstructorMember,
    FieldMember,
    MethodMember,
    Modifier,
    OpaqueStatement,
    Parameter,
    TypeRef,
    VOID,
)
from csharp_refactor.syntax.parser import parse_class

A = TypeRef("A")


def _field(*names, type_ref=A, modifiers=("private", "readonly")):
    return FieldMember(
        type=type_ref,
        modifiers=tuple(Modifier(keyword) for keyword in modifiers),
        names=tuple(names),
    )


def _constructor(name="ProgramTests", parameters=(), body=()):
    return ConstructorMember(
        name=name,
        modifiers=(Modifier("public"),),
        parameters=tuple(Parameter(n, t) for n, t in parameters),
        body=tuple(body) if body is not None else None,
    )


SCENARIO_A = """\
class ProgramTests
{
    private readonly A _a1, _a2, a3, a4;
}
"""

SCENARIO_B = """\
class ProgramTests
{
    private readonly A _a1, _a2, _a3, a4;
    public ProgramTests(A a1, A a2, string x)
    {
        _a2 = a2;
        _a1 = a1;
    }
}
"""

SCENARIO_C = """\
class ProgramTests
{
    private readonly A _a1, _a2, _a3, a4;

    // this is a comment
    public ProgramTests(A a1, A a2)
    {
        // this is a comment
        _a2 = a2;
        _a1 = a1;
        string x = "x";
    }

    public void Test(){
    }
}
"""

EMPTY_CONSTRUCTOR = """\
class ProgramTests
{
    private readonly A _a1, _a2, a3, a4;
    public ProgramTests()
    {

    }
}
"""

NO_READONLY = """\
class Plain
{
    private A _a;
    public static readonly B Shared;
    public void Run() { }
}
"""

COMPLETE = """\
class Service
{
    private readonly ILogger _logger;
    private readonly IStore store;

    public Service(ILogger logger, IStore _store)
    {
        _logger = logger;
        store = _store;
    }
}
"""

EXPRESSION_BODIED = """\
class Holder
{
    private readonly A _a;
    public Holder(A a) => _a = a;
}
"""

THIS_QUALIFIED = """\
class Holder
{
    private readonly A _a;
    public Holder(A a)
    {
        this._a = a;
    }
}
"""

ALL_SOURCES = [
    SCENARIO_A,
    SCENARIO_B,
    SCENARIO_C,
    EMPTY_CONSTRUCTOR,
    NO_READONLY,
    COMPLETE,
    EXPRESSION_BODIED,
    THIS_QUALIFIED,
]


class TestDeriveParameterName:
    """Tests for the field to parameter naming convention."""

    def test_strips_leading_underscore(self):
        assert derive_parameter_name("_logger") == "logger"

    def test_adds_underscore(self):
        assert derive_parameter_name("logger") == "_logger"

    def test_strips_only_one_underscore(self):
        assert derive_parameter_name("__logger") == "_logger"

    def test_collisions_are_not_resolved(self):
        assert derive_parameter_name("x") == derive_parameter_name("__x")


class TestCollectCandidates:
    """Tests for candidate collection from field declarations."""

    def test_declaration_order(self):
        class_node = ClassNode(
            name="C",
            members=(_field("_b", "a"), _field("c", type_ref=TypeRef("string"))),
        )

        candidates = collect_candidates(class_node)

        assert [c.field_name for c in candidates] == ["_b", "a", "c"]
        assert [c.parameter_name for c in candidates] == ["b", "_a", "_c"]
        assert candidates[2].field_type == TypeRef("string")

    def test_skips_mutable_and_static_fields(self):
        class_node = ClassNode(
            name="C",
            members=(
                _field("_mutable", modifiers=("private",)),
                _field("Shared", modifiers=("public", "static", "readonly")),
                _field("_kept"),
            ),
        )

        assert [c.field_name for c in collect_candidates(class_node)] == ["_kept"]

    def test_skips_static_constructor(self):
        static_ctor = ConstructorMember(
            name="C", modifiers=(Modifier("static"),), parameters=(), body=()
        )
        instance_ctor = _constructor("C")
        class_node = ClassNode(name="C", members=(static_ctor, instance_ctor))

        assert find_constructor(class_node) is instance_ctor

    def test_collisions(self):
        class_node = ClassNode(name="C", members=(_field("x", "__x", "_y"),))

        collisions = find_parameter_collisions(collect_candidates(class_node))

        assert collisions == {"_x": ["x", "__x"]}


class TestSynthesize:
    """Tests for synthesize on hand-built trees."""

    def test_creates_public_constructor(self):
        class_node = ClassNode(name="C", members=(_field("_a", "b"),))

        result = synthesize(class_node)

        constructor = result.members[-1]
        assert isinstance(constructor, ConstructorMember)
        assert constructor.name == "C"
        assert constructor.has_modifier("public")
        assert constructor.parameters == (Parameter("a", A), Parameter("_b", A))
        assert constructor.body == (
            AssignmentStatement("_a", "a"),
            AssignmentStatement("b", "_b"),
        )

    def test_input_not_mutated(self):
        class_node = ClassNode(name="C", members=(_field("_a"), _constructor("C")))
        before = class_node.members

        synthesize(class_node)

        assert class_node.members is before
        assert class_node.members[1].parameters == ()

    def test_appends_after_existing(self):
        opaque = OpaqueStatement(kind="local_declaration_statement", normalized='string x = "x";')
        method = MethodMember(
            name="Run", return_type=VOID, modifiers=(), parameters=(), body=()
        )
        class_node = ClassNode(
            name="C",
            members=(
                _field("_a", "_b"),
                _constructor("C", [("x", TypeRef("string"))], [opaque, AssignmentStatement("_a", "a")]),
                method,
            ),
        )

        result = synthesize(class_node)

        constructor = result.members[1]
        assert [p.name for p in constructor.parameters] == ["x", "a", "b"]
        assert constructor.body == (
            opaque,
            AssignmentStatement("_a", "a"),
            AssignmentStatement("_b", "b"),
        )
        assert result.members[0] == class_node.members[0]
        assert result.members[2] is method

    def test_parameter_type_is_not_compared(self):
        class_node = ClassNode(
            name="C",
            members=(
                _field("_a"),
                _constructor("C", [("a", TypeRef("object"))], [AssignmentStatement("_a", "a")]),
            ),
        )

        assert synthesize(class_node) == class_node
        assert not is_applicable(class_node)

    def test_assignment_from_other_identifier_counts(self):
        class_node = ClassNode(
            name="C",
            members=(
                _field("_a"),
                _constructor("C", [("a", A)], [AssignmentStatement("_a", "other")]),
            ),
        )

        assert synthesize(class_node) == class_node

    def test_duplicate_parameter_names_kept(self):
        class_node = ClassNode(name="C", members=(_field("x", "__x"),))

        constructor = synthesize(class_node).members[-1]

        assert [p.name for p in constructor.parameters] == ["_x", "_x"]
        assert len(constructor.body) == 2

    def test_no_readonly_fields_is_noop(self):
        class_node = ClassNode(name="C", members=(_field("_a", modifiers=("private",)),))

        assert synthesize(class_node) is class_node
        assert not is_applicable(class_node)

    def test_empty_class_is_noop(self):
        class_node = ClassNode(name="C", members=())

        assert synthesize(class_node) is class_node
        assert not is_applicable(class_node)

    def test_bodiless_constructor_is_noop(self):
        class_node = ClassNode(
            name="C", members=(_field("_a"), _constructor("C", body=None))
        )

        assert synthesize(class_node) is class_node
        assert not is_applicable(class_node)

    def test_cancelled_token(self):
        token = CancellationToken()
        token.cancel()
        class_node = ClassNode(name="C", members=(_field("_a"),))

        assert synthesize(class_node, token) is class_node
        assert not is_applicable(class_node, token)

    def test_uncancelled_token(self):
        class_node = ClassNode(name="C", members=(_field("_a"),))

        assert is_applicable(class_node, CancellationToken())
        assert synthesize(class_node, CancellationToken()) != class_node


class TestScenarios:
    """End-to-end scenarios on parsed C# classes."""

    def test_scenario_a_new_constructor(self):
        result = synthesize(parse_class(SCENARIO_A))

        constructor = find_constructor(result)
        assert constructor.has_modifier("public")
        assert constructor.parameter_names == ["a1", "a2", "_a3", "_a4"]
        assert len(constructor.body) == 4
        assert all(isinstance(s, AssignmentStatement) for s in constructor.body)

    def test_existing_empty_constructor(self):
        result = synthesize(parse_class(EMPTY_CONSTRUCTOR))

        assert len(result.constructors) == 1
        constructor = result.constructors[0]
        assert len(constructor.parameters) == 4
        assert len(constructor.body) == 4

    def test_scenario_b_adds_parameters(self):
        result = synthesize(parse_class(SCENARIO_B))

        constructor = find_constructor(result)
        assert constructor.parameter_names == ["a1", "a2", "x", "a3", "_a4"]
        assert constructor.body[2:] == (
            AssignmentStatement("_a3", "a3"),
            AssignmentStatement("a4", "_a4"),
        )
        assert len(constructor.body) == 4

    def test_scenario_c_adds_statements(self):
        original = parse_class(SCENARIO_C)
        result = synthesize(original)

        constructor = find_constructor(result)
        assert len(constructor.parameters) == 4
        assert len(constructor.body) == 5
        assert constructor.body[:3] == find_constructor(original).body
        assert isinstance(constructor.body[2], OpaqueStatement)
        assert constructor.body[3:] == (
            AssignmentStatement("_a3", "a3"),
            AssignmentStatement("a4", "_a4"),
        )
        # Other members untouched and in place
        assert result.members[0] == original.members[0]
        assert result.members[2] == original.members[2]

    def test_this_qualified_assignment_not_recognised(self):
        result = synthesize(parse_class(THIS_QUALIFIED))

        constructor = find_constructor(result)
        assert constructor.parameter_names == ["a"]
        assert constructor.body[-1] == AssignmentStatement("_a", "a")


class TestProperties:
    """Properties that must hold for every class."""

    @pytest.mark.parametrize("source", ALL_SOURCES)
    def test_idempotent(self, source):
        once = synthesize(parse_class(source))

        assert synthesize(once) == once
        assert not is_applicable(once)

    @pytest.mark.parametrize("source", ALL_SOURCES)
    def test_applicability_agrees_with_synthesize(self, source):
        class_node = parse_class(source)

        assert is_applicable(class_node) == (synthesize(class_node) != class_node)

    @pytest.mark.parametrize("source", ALL_SOURCES)
    def test_field_coverage(self, source):
        class_node = parse_class(source)
        constructor = find_constructor(class_node)
        if constructor is not None and constructor.body is None:
            pytest.skip("constructor without block body is left alone")

        result = find_constructor(synthesize(class_node))
        for candidate in collect_candidates(class_node):
            assert candidate.parameter_name in result.parameter_names
            assert any(
                isinstance(s, AssignmentStatement) and s.target == candidate.field_name
                for s in result.body
            )

    @pytest.mark.parametrize("source", ALL_SOURCES)
    def test_order_preserved(self, source):
        class_node = parse_class(source)
        before = find_constructor(class_node)
        if before is None or before.body is None:
            pytest.skip("no block-bodied constructor to compare")

        after = find_constructor(synthesize(class_node))
        assert after.parameters[: len(before.parameters)] == before.parameters
        assert after.body[: len(before.body)] == before.body
