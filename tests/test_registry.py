"""Tests for index registration and dynamic mapping control."""

import pytest

from esmapper import (
    Dynamic,
    DynamicMappingStateError,
    IndexNotFound,
    InvalidIndexName,
    MapperError,
    TypeNotFound,
)
from esmapper.models import INDEX_DYNAMIC_KEY


class TestIndexRegistration:
    """Tests for index(), get_index() and index_count()."""

    def test_index_has_defaults_and_no_mappings(self, mapper):
        mapper.index("shop")
        record = mapper.get_index("shop")
        assert record.name == "shop"
        assert record.mappings == {}
        assert record.settings == mapper.get_default_config()

    def test_settings_are_a_copy(self, mapper):
        mapper.index("shop")
        assert mapper.get_index("shop").settings is not mapper.get_default_config()

    @pytest.mark.parametrize("name", ["", None, 42, ["shop"]])
    def test_invalid_names(self, mapper, name):
        with pytest.raises(InvalidIndexName):
            mapper.index(name)

    def test_invalid_name_is_value_error(self, mapper):
        with pytest.raises(ValueError):
            mapper.index("")

    def test_get_unknown_index(self, mapper):
        assert mapper.get_index("nope") is None

    def test_index_count(self, mapper):
        assert mapper.index_count() == 0
        mapper.index("a")
        mapper.index("b")
        assert mapper.index_count() == 2

    def test_reregistering_drops_mappings(self, mapper, product):
        mapper.map_from_doc("shop", "product", product)
        mapper.index("shop")
        assert mapper.index_count() == 1
        assert mapper.get_mappings("shop") == {}

    def test_get_mappings_missing_index(self, mapper):
        with pytest.raises(IndexNotFound):
            mapper.get_mappings("missing")

    def test_not_found_is_lookup_error(self, mapper):
        with pytest.raises(LookupError):
            mapper.get_single_mapping("missing", "t")

    def test_get_single_mapping_unknown_type(self, mapper):
        mapper.index("shop")
        assert mapper.get_single_mapping("shop", "nothing") is None

    def test_clear_removes_indices(self, mapper, product):
        mapper.map_from_doc("shop", "product", product)
        mapper.clear()
        assert mapper.index_count() == 0
        assert len(mapper.key_log) == 0


class TestIndexLevelDynamic:
    """Tests for enable/disable and dynamic_mapping()."""

    def test_enable_defaults_to_false(self, mapper):
        mapper.index("idx")
        mapper.enable_index_level_dynamic_mappings("idx")
        assert mapper.get_index("idx").settings[INDEX_DYNAMIC_KEY] is False

    def test_enable_with_status(self, mapper):
        mapper.index("idx")
        mapper.enable_index_level_dynamic_mappings("idx", 1)
        assert mapper.get_index("idx").index_level_dynamic is True

    def test_enable_is_idempotent(self, mapper):
        mapper.index("idx")
        mapper.enable_index_level_dynamic_mappings("idx", True)
        mapper.enable_index_level_dynamic_mappings("idx", False)
        assert mapper.get_index("idx").settings[INDEX_DYNAMIC_KEY] is True

    def test_enable_unknown_index(self, mapper):
        with pytest.raises(IndexNotFound):
            mapper.enable_index_level_dynamic_mappings("nope")

    def test_disable_removes_key(self, mapper):
        mapper.index("idx")
        mapper.enable_index_level_dynamic_mappings("idx")
        mapper.disable_index_level_dynamic_mappings("idx")
        assert INDEX_DYNAMIC_KEY not in mapper.get_index("idx").settings
        assert mapper.get_index("idx").index_level_dynamic is None

    def test_disable_without_key_is_noop(self, mapper):
        mapper.index("idx")
        before = dict(mapper.get_index("idx").settings)
        mapper.disable_index_level_dynamic_mappings("idx")
        assert mapper.get_index("idx").settings == before

    def test_disable_unknown_index(self, mapper):
        with pytest.raises(IndexNotFound):
            mapper.disable_index_level_dynamic_mappings("nope")

    def test_dynamic_mapping_cascades(self, mapper):
        mapper.map_from_doc("idx", "a", {"x": 1})
        mapper.map_from_doc("idx", "b", {"y": "text"})
        mapper.enable_index_level_dynamic_mappings("idx")
        mapper.dynamic_mapping("idx", False)
        assert all(m.dynamic is Dynamic.FALSE for m in mapper.get_mappings("idx").values())

        mapper.dynamic_mapping("idx", True)
        assert mapper.get_index("idx").settings[INDEX_DYNAMIC_KEY] is True
        assert [m.to_dict()["dynamic"] for m in mapper.get_mappings("idx").values()] == ["true", "true"]

    def test_dynamic_mapping_requires_index_level(self, mapper):
        mapper.index("idx")
        with pytest.raises(DynamicMappingStateError):
            mapper.dynamic_mapping("idx", True)

    def test_dynamic_mapping_unknown_index(self, mapper):
        with pytest.raises(IndexNotFound):
            mapper.dynamic_mapping("nope", True)

    def test_new_mapping_inherits_index_status(self, mapper):
        mapper.index("idx")
        mapper.enable_index_level_dynamic_mappings("idx")
        mapper.dynamic_mapping("idx", False)
        mapping = mapper.map_from_doc("idx", "late", {"x": 1})
        assert mapping.dynamic is Dynamic.FALSE


class TestTypeLevelDynamic:
    """Tests for type_dynamic_mapping()."""

    def test_sets_single_type(self, mapper):
        mapper.map_from_doc("idx", "a", {"x": 1})
        mapper.map_from_doc("idx", "b", {"x": 2})
        mapper.type_dynamic_mapping("idx", "a", False)
        assert mapper.get_single_mapping("idx", "a").dynamic is Dynamic.FALSE
        assert mapper.get_single_mapping("idx", "b").dynamic is Dynamic.TRUE

    def test_rejected_when_index_level_active(self, mapper):
        mapper.map_from_doc("idx", "t", {"x": 1})
        mapper.enable_index_level_dynamic_mappings("idx")
        with pytest.raises(DynamicMappingStateError):
            mapper.type_dynamic_mapping("idx", "t", True)

    def test_allowed_again_after_disable(self, mapper):
        mapper.map_from_doc("idx", "t", {"x": 1})
        mapper.enable_index_level_dynamic_mappings("idx")
        mapper.disable_index_level_dynamic_mappings("idx")
        mapper.type_dynamic_mapping("idx", "t", False)
        assert mapper.get_single_mapping("idx", "t").dynamic is Dynamic.FALSE

    def test_unknown_type(self, mapper):
        mapper.index("idx")
        with pytest.raises(TypeNotFound):
            mapper.type_dynamic_mapping("idx", "t", True)

    def test_unknown_index(self, mapper):
        with pytest.raises(IndexNotFound):
            mapper.type_dynamic_mapping("idx", "t", True)

    def test_state_error_is_mapper_error(self, mapper):
        mapper.index("idx")
        mapper.enable_index_level_dynamic_mappings("idx")
        with pytest.raises(MapperError):
            mapper.type_dynamic_mapping("idx", "t", True)


class TestDynamic:
    """Tests for the Dynamic enum."""

    def test_from_bool(self):
        assert Dynamic.from_bool(True) is Dynamic.TRUE
        assert Dynamic.from_bool(0) is Dynamic.FALSE
        assert Dynamic.from_bool("") is Dynamic.FALSE

    def test_wire_values(self):
        assert Dynamic.TRUE.value == "true"
        assert Dynamic.FALSE == "false"

    def test_truthiness(self):
        assert Dynamic.TRUE
        assert not Dynamic.FALSE
