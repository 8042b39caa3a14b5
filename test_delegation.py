"""
test_delegation.py

Unit tests for the Delegation Resolver.

Tests prove:
- Lookup walks receiver -> delegate -> ... and returns ABSENT at the end
- Getters and setters run with the receiver as host
- Assignment shadows on the receiver and never writes a delegate
- Read-only attributes anywhere in the chain block assignment
- Strict vs non-strict write policy
- Cycles and over-long chains are reported, not looped on
"""

import pytest

from attrchain import (
    ABSENT,
    CyclicDelegationError,
    EngineConfig,
    NotExtensibleError,
    NotReadableError,
    NotWritableError,
    ObjectRecord,
)
from attrchain.resolver import find_owner, iter_chain, resolve_get, resolve_set


@pytest.fixture
def chain():
    """grandparent <- parent <- child, returned together to keep them alive."""
    grandparent = ObjectRecord.literal({"a": "gp", "only_gp": 1}, label="grandparent")
    parent = ObjectRecord.literal({"a": "p"}, delegate=grandparent, label="parent")
    child = ObjectRecord(parent, label="child")
    return grandparent, parent, child


# =============================================================================
# SECTION 1: Lookup
# =============================================================================

class TestLookup:

    def test_first_owner_wins(self, chain):
        grandparent, parent, child = chain
        assert child.get("a") == "p"
        assert child.get("only_gp") == 1

    def test_absent_at_end_of_chain(self, chain):
        _, _, child = chain
        assert child.get("nothing") is ABSENT
        assert resolve_get(child, "nothing") is ABSENT

    def test_find_owner(self, chain):
        grandparent, parent, child = chain
        owner, descriptor = find_owner(child, "only_gp")
        assert owner is grandparent
        assert descriptor.value == 1
        assert find_owner(child, "nothing") is None

    def test_iter_chain_order(self, chain):
        grandparent, parent, child = chain
        assert list(iter_chain(child)) == [child, parent, grandparent]
        assert child.chain() == [child, parent, grandparent]

    def test_is_delegate_of(self, chain):
        grandparent, parent, child = chain
        assert grandparent.is_delegate_of(child)
        assert parent.is_delegate_of(child)
        assert not child.is_delegate_of(parent)
        assert not child.is_delegate_of(child)

    def test_inherited_getter_runs_with_receiver(self):
        proto = ObjectRecord(label="proto")
        proto.define("me", {"get": lambda host: host})
        r = ObjectRecord(proto)
        assert r.get("me") is r
        assert proto.get("me") is proto

    def test_getter_sees_receiver_attributes(self):
        proto = ObjectRecord()
        proto.define("area", {"get": lambda host: host.get("w") * host.get("h")})
        r = ObjectRecord.literal({"w": 2, "h": 3}, delegate=proto)
        assert r.get("area") == 6

    def test_write_only_attribute_is_not_readable(self):
        r = ObjectRecord()
        r.define("sink", {"set": lambda host, v: None})
        with pytest.raises(NotReadableError):
            r.get("sink")


# =============================================================================
# SECTION 2: Assignment and Shadowing
# =============================================================================

class TestShadowing:

    def test_receiver_shadows_delegate(self):
        d = ObjectRecord(label="D")
        d.define("a", {"value": 1, "writable": True})
        r = ObjectRecord(d, label="R")

        r.set("a", 2)

        assert r.get("a") == 2
        assert d.get("a") == 1
        assert r.has_own("a")

    def test_new_attribute_lands_on_receiver(self, chain):
        grandparent, parent, child = chain
        child.set("fresh", 1)
        assert child.has_own("fresh")
        assert not parent.has_own("fresh")
        assert not grandparent.has_own("fresh")

    def test_created_attribute_uses_shorthand_flags(self):
        r = ObjectRecord()
        r.set("x", 1)
        d = r.get_own_descriptor("x")
        assert (d.writable, d.enumerable, d.configurable) == (False, False, False)
        with pytest.raises(NotWritableError):
            r.set("x", 2)

    def test_open_assignment_config(self):
        r = ObjectRecord(config=EngineConfig(open_assignment=True))
        r.set("x", 1)
        r.set("x", 2)
        d = r.get_own_descriptor("x")
        assert d.writable and d.enumerable and d.configurable
        assert r.get("x") == 2

    def test_update_own_keeps_flags(self):
        r = ObjectRecord()
        r.define("x", {"value": 1, "writable": True, "enumerable": True})
        r.set("x", 5)
        d = r.get_own_descriptor("x")
        assert d.value == 5
        assert d.enumerable and not d.configurable

    def test_read_only_delegate_blocks_shadowing(self):
        d = ObjectRecord()
        d.define("a", {"value": 1})
        r = ObjectRecord(d)
        with pytest.raises(NotWritableError):
            r.set("a", 2)
        assert not r.has_own("a")

    def test_non_strict_ignores_read_only(self):
        d = ObjectRecord()
        d.define("a", {"value": 1})
        r = ObjectRecord(d)
        assert r.set("a", 2, strict=False) is False
        assert r.get("a") == 1

    def test_non_strict_config_default(self):
        r = ObjectRecord(config=EngineConfig(strict=False))
        r.define("a", {"value": 1})
        assert r.set("a", 2) is False
        with pytest.raises(NotWritableError):
            r.set("a", 2, strict=True)

    def test_non_extensible_receiver(self):
        d = ObjectRecord.literal({"a": 1})
        r = ObjectRecord(d)
        r.prevent_extensions()
        with pytest.raises(NotExtensibleError):
            r.set("a", 2)
        assert r.set("a", 2, strict=False) is False
        assert d.get("a") == 1


class TestInheritedSetters:

    def test_setter_runs_with_receiver(self):
        proto = ObjectRecord()
        proto.define("name", {
            "get": lambda host: host.get("_name"),
            "set": lambda host, v: host.define("_name", {"value": v.title(), "writable": True}),
        })
        r = ObjectRecord(proto)

        r.set("name", "josef gisis")

        assert r.get("name") == "Josef Gisis"
        assert r.has_own("_name")
        assert not proto.has_own("_name")
        assert not r.has_own("name")

    def test_getter_without_setter_is_not_writable(self):
        proto = ObjectRecord()
        proto.define("fixed", {"get": lambda host: 1})
        r = ObjectRecord(proto)
        with pytest.raises(NotWritableError):
            r.set("fixed", 2)
        with pytest.raises(NotWritableError):
            r.set("fixed", 2, strict=False)
        assert not r.has_own("fixed")

    def test_setter_return_value_reported_as_applied(self):
        calls = []
        r = ObjectRecord()
        r.define("log", {"set": lambda host, v: calls.append(v)})
        assert r.set("log", "x") is True
        assert calls == ["x"]


# =============================================================================
# SECTION 3: Cycle Safety
# =============================================================================

class TestCycles:

    def test_two_record_cycle(self):
        a = ObjectRecord(label="A")
        b = ObjectRecord(a, label="B")
        a.set_delegate(b)

        with pytest.raises(CyclicDelegationError) as exc_info:
            a.get("x")
        assert exc_info.value.path == ["A", "B", "A"]

    def test_cycle_on_set(self):
        a = ObjectRecord(label="A")
        b = ObjectRecord(a, label="B")
        a.set_delegate(b)
        with pytest.raises(CyclicDelegationError):
            a.set("x", 1)

    def test_self_cycle(self):
        a = ObjectRecord(label="A")
        a.set_delegate(a)
        with pytest.raises(CyclicDelegationError):
            a.has("x")

    def test_owner_found_before_cycle(self):
        a = ObjectRecord.literal({"x": 1}, label="A")
        b = ObjectRecord(a, label="B")
        a.set_delegate(b)
        assert a.get("x") == 1

    def test_depth_bound(self):
        config = EngineConfig(max_chain_depth=3)
        records = [ObjectRecord(label="r0", config=config)]
        for i in range(1, 5):
            records.append(ObjectRecord(records[-1], label=f"r{i}", config=config))

        with pytest.raises(CyclicDelegationError) as exc_info:
            records[-1].get("missing")
        assert exc_info.value.max_depth == 3

        assert records[2].get("missing") is ABSENT

    def test_explicit_max_depth(self, chain):
        _, _, child = chain
        with pytest.raises(CyclicDelegationError):
            list(iter_chain(child, max_depth=2))


class TestResolverFunctions:

    def test_resolve_set_direct(self):
        r = ObjectRecord()
        assert resolve_set(r, "x", 1) is True
        assert resolve_get(r, "x") == 1
