"""Tests for base type resolution."""

import pytest

from dd_core.errors import ResolutionError
from dd_core.parser import parse_dictionary_text
from dd_core.resolver import (
    BASE_TYPE_OVERRIDES,
    PRIMITIVE_TYPES,
    TypeResolver,
    find_typedefn,
    resolve_to_base_type,
)
from dd_core.store import EntityStore


def _store(body: str) -> EntityStore:
    return parse_dictionary_text(f"<d>{body}</d>")


BASE_TYPES = """
<base>
  <typedefn type-name="OctetString"/>
  <typedefn type-name="Integer32"/>
  <typedefn type-name="Enumerated" type-parent="Integer32"/>
  <typedefn type-name="Address" type-parent="OctetString"/>
  <typedefn type-name="Session-Type" type-parent="Enumerated"/>
</base>
"""


class TestOverridesAndPrimitives:
    @pytest.mark.parametrize("type_name", sorted(BASE_TYPE_OVERRIDES))
    def test_overrides_apply_in_any_scope(self, type_name):
        store = EntityStore()
        assert resolve_to_base_type(store, type_name, "42") == BASE_TYPE_OVERRIDES[type_name]

    def test_override_beats_typedefn(self):
        store = _store(BASE_TYPES)
        assert resolve_to_base_type(store, "Address", "0") == "OctetString"

    @pytest.mark.parametrize("type_name", PRIMITIVE_TYPES)
    def test_primitives_resolve_to_themselves(self, type_name):
        assert resolve_to_base_type(EntityStore(), type_name, "1") == type_name

    def test_override_targets_are_primitives(self):
        assert set(BASE_TYPE_OVERRIDES.values()) <= set(PRIMITIVE_TYPES)


class TestChains:
    def test_resolves_through_chain(self):
        store = _store(BASE_TYPES)
        assert resolve_to_base_type(store, "Session-Type", "0") == "Integer32"

    def test_falls_back_to_universal_application(self):
        store = _store(BASE_TYPES + '<application id="4" name="CC"/>')
        assert resolve_to_base_type(store, "Enumerated", "4") == "Integer32"

    def test_application_definition_shadows_universal(self):
        store = _store(
            BASE_TYPES
            + '<application id="5" name="X"><typedefn type-name="Enumerated" type-parent="Unsigned32"/>'
            "</application>"
        )
        assert resolve_to_base_type(store, "Enumerated", "5") == "Unsigned32"
        assert resolve_to_base_type(store, "Enumerated", "0") == "Integer32"

    def test_chain_crosses_into_universal_scope(self):
        store = _store(
            BASE_TYPES
            + '<application id="4" name="CC"><typedefn type-name="Local" type-parent="Session-Type"/>'
            "</application>"
        )
        assert resolve_to_base_type(store, "Local", "4") == "Integer32"

    def test_custom_type_to_float_uses_override(self):
        store = _store(
            '<application id="1" name="X"><typedefn type-name="Custom" type-parent="Float32"/>'
            "</application>"
        )
        assert resolve_to_base_type(store, "Custom", "1") == "Unsigned32"

    def test_find_typedefn_reports_scope(self):
        store = _store(BASE_TYPES + '<application id="4" name="CC"/>')
        typedefn, application_id = find_typedefn(store, "Enumerated", "4")
        assert typedefn["applicationId"] == "0"
        assert application_id == "0"


class TestFailures:
    def test_unknown_type(self):
        with pytest.raises(ResolutionError) as exc_info:
            resolve_to_base_type(_store(BASE_TYPES), "Nope", "1")
        assert exc_info.value.issue.code == "UNRESOLVED_TYPE"

    def test_definition_without_parent(self):
        store = _store('<base><typedefn type-name="Orphan"/></base>')
        with pytest.raises(ResolutionError):
            resolve_to_base_type(store, "Orphan", "0")

    def test_cycle_detected(self):
        store = _store(
            '<base><typedefn type-name="A" type-parent="B"/>'
            '<typedefn type-name="B" type-parent="A"/></base>'
        )
        with pytest.raises(ResolutionError) as exc_info:
            resolve_to_base_type(store, "A", "0")
        assert exc_info.value.issue.code == "CYCLIC_TYPE"
        assert "A -> B -> A" in exc_info.value.message

    def test_self_reference_detected(self):
        store = _store('<base><typedefn type-name="Loop" type-parent="Loop"/></base>')
        with pytest.raises(ResolutionError):
            resolve_to_base_type(store, "Loop", "0")


class TestTypeResolver:
    def test_memoizes_per_scope(self):
        store = _store(BASE_TYPES)
        resolver = TypeResolver(store)
        assert resolver.resolve("Session-Type", "0") == "Integer32"
        store.reset()
        assert resolver.resolve("Session-Type", "0") == "Integer32"
