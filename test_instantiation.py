"""
test_instantiation.py

Unit tests for the Instantiation Guard.

Tests prove:
- instantiate() always builds a fresh host
- A returned ObjectRecord overrides the fresh host
- Constructor prototypes are shared through delegation
- safe_invoke() never writes onto an ambient record
- Derived constructors can run their parent's routine on the fresh host
"""

import pytest

from attrchain import (
    ABSENT,
    Constructor,
    InstantiationError,
    ObjectRecord,
    constructor,
    instance_of,
    instantiate,
    is_under_construction,
)


def _person(host, name):
    host.define("name", {"value": name, "writable": True, "enumerable": True, "configurable": True})


@pytest.fixture
def Person():
    ctor = Constructor(_person, name="Person")
    ctor.prototype.define("say_name", {"value": lambda self: self.get("name")})
    return ctor


# =============================================================================
# SECTION 1: instantiate
# =============================================================================

class TestInstantiate:

    def test_plain_routine_gets_fresh_host(self):
        seen = []

        def routine(host, value):
            seen.append(host)
            host.set("value", value)

        a = instantiate(routine, 1)
        b = instantiate(routine, 2)

        assert a is seen[0] and b is seen[1]
        assert a is not b
        assert a.get("value") == 1
        assert b.get("value") == 2
        assert a.delegate is None

    def test_kwargs_forwarded(self):
        r = instantiate(lambda host, *, x: host.set("x", x), x=5)
        assert r.get("x") == 5

    def test_returned_record_overrides(self):
        replacement = ObjectRecord.literal({"replaced": True})
        r = instantiate(lambda host: replacement)
        assert r is replacement

    def test_non_record_return_is_ignored(self):
        r = instantiate(lambda host: "ignored")
        assert isinstance(r, ObjectRecord)

    def test_not_callable(self):
        with pytest.raises(InstantiationError):
            instantiate(42)

    def test_under_construction_only_during_routine(self):
        observed = []
        r = instantiate(lambda host: observed.append(is_under_construction(host)))
        assert observed == [True]
        assert not is_under_construction(r)

    def test_mark_cleared_when_routine_raises(self):
        captured = []

        def failing(host):
            captured.append(host)
            raise ValueError("boom")

        with pytest.raises(ValueError):
            instantiate(failing)
        assert not is_under_construction(captured[0])


# =============================================================================
# SECTION 2: Constructor
# =============================================================================

class TestConstructor:

    def test_call_instantiates(self, Person):
        p = Person("Josef")
        assert p.get("name") == "Josef"
        assert p.delegate is Person.prototype
        assert p.label == "Person"

    def test_prototype_shared(self, Person):
        a = Person("a")
        b = Person("b")
        assert a.call("say_name") == "a"
        assert b.call("say_name") == "b"
        assert not a.has_own("say_name")

    def test_prototype_additions_reach_existing_instances(self, Person):
        p = Person("late")
        Person.prototype.define("shout", {"value": lambda self: self.get("name").upper()})
        assert p.call("shout") == "LATE"

    def test_constructor_back_reference(self, Person):
        p = Person("x")
        assert p.get("constructor") is Person
        assert not Person.prototype.property_is_enumerable("constructor")
        assert "constructor" not in list(p)

    def test_instance_of(self, Person):
        p = Person("x")
        assert instance_of(p, Person)
        assert not instance_of(ObjectRecord(), Person)
        assert not instance_of("not a record", Person)

    def test_instance_of_needs_constructor(self):
        with pytest.raises(InstantiationError):
            instance_of(ObjectRecord(), _person)

    def test_decorator_forms(self):
        @constructor
        def Point(host, x, y):
            host.set("x", x)
            host.set("y", y)

        @constructor(name="Shape")
        def shape(host):
            pass

        assert isinstance(Point, Constructor)
        assert Point.name == "Point"
        assert shape.name == "Shape"
        assert Point(1, 2).get("y") == 2

    def test_routine_must_be_callable(self):
        with pytest.raises(InstantiationError):
            Constructor("nope")


# =============================================================================
# SECTION 3: safe_invoke
# =============================================================================

class TestSafeInvoke:

    def test_ambient_context_is_untouched(self, Person):
        ambient = ObjectRecord(label="global")

        p = Person.safe_invoke(ambient, "John Doe")

        assert p is not ambient
        assert p.get("name") == "John Doe"
        assert ambient.get("name") is ABSENT
        assert instance_of(p, Person)

    def test_none_context_reroutes(self, Person):
        p = Person.safe_invoke(None, "x")
        assert instance_of(p, Person)

    def test_finished_instance_is_not_reinitialised(self, Person):
        p = Person("first")
        q = Person.safe_invoke(p, "second")
        assert q is not p
        assert p.get("name") == "first"

    def test_fresh_context_is_used(self, Person):
        hosts = []

        def routine(host):
            hosts.append(Person.safe_invoke(host, "inner"))

        Derived = Constructor(routine, name="Derived").inherit(Person)
        d = Derived()

        assert hosts == [d]
        assert d.get("name") == "inner"
        assert instance_of(d, Derived)
        assert instance_of(d, Person)

    def test_unrelated_fresh_context_is_not_used(self, Person):
        hosts = []
        r = instantiate(lambda host: hosts.append(Person.safe_invoke(host, "x")))
        assert hosts[0] is not r
        assert r.get("name") is ABSENT


# =============================================================================
# SECTION 4: Constructor Inheritance
# =============================================================================

class TestInheritance:

    def test_rectangle_square(self):
        @constructor
        def Rectangle(host, length, width):
            host.set("length", length)
            host.set("width", width)

        Rectangle.prototype.define("get_area", {
            "value": lambda self: self.get("length") * self.get("width"),
        })
        Rectangle.prototype.define("to_string", {
            "value": lambda self: f"[Rectangle {self.get('length')}x{self.get('width')}]",
            "writable": True,
        })

        @constructor
        def Square(host, size):
            Rectangle.safe_invoke(host, size, size)

        Square.inherit(Rectangle)
        Square.prototype.define("to_string", {
            "value": lambda self: Rectangle.prototype.get("to_string")(self).replace(
                "Rectangle", "Square"
            ),
        })

        sq = Square(3)

        assert sq.call("get_area") == 9
        assert sq.call("to_string") == "[Square 3x3]"
        assert instance_of(sq, Rectangle)
        assert Rectangle.prototype.is_delegate_of(sq)
        assert sq.get("constructor") is Square
