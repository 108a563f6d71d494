import pytest

from clearance import BatchItem, FieldSpec, SchemaError


class TestSchema:
    def test_field_spec_from_mapping(self):
        spec = FieldSpec.from_mapping({"name": "username", "rules": ["required", "alpha"], "valid": True})
        assert spec == FieldSpec(name="username", rules=("required", "alpha"), valid=True)
        assert spec.value is None
        assert FieldSpec.from_mapping(spec) is spec

    @pytest.mark.parametrize(
        "mapping",
        [
            pytest.param({"rules": []}, id="missing name"),
            pytest.param({"name": 1, "rules": []}, id="name not a string"),
            pytest.param({"name": "username"}, id="missing rules"),
            pytest.param({"name": "username", "rules": "required"}, id="rules as string"),
            pytest.param({"name": "username", "rules": ["required", ["alpha"]]}, id="nested rule name"),
            pytest.param({"name": "username", "rules": ["required", 3]}, id="rule name not a string"),
            pytest.param({"name": "username", "rules": [], "valid": "yes"}, id="valid not a bool"),
            pytest.param({"name": "username", "rules": [], "message": 3}, id="message not a string"),
        ],
    )
    def test_malformed_field_spec(self, mapping):
        with pytest.raises(SchemaError):
            FieldSpec.from_mapping(mapping)

    def test_batch_item(self):
        assert BatchItem.from_mapping({"name": "age", "value": 42}) == BatchItem("age", 42)
        assert BatchItem.from_mapping({"name": "age"}).value is None
        with pytest.raises(SchemaError):
            BatchItem.from_mapping({"value": 42})
