"""Tests for schema-driven decoding.

Focus is positional parameter matching and the structural rules
around salt and hash.
"""
import logging

import pytest

from phc.algorithms.argon2 import ARGON2_SCHEMA
from phc.core.b64 import LENIENT, Base64Error
from phc.engine.decoder import build, decode, match_parameters
from phc.engine.errors import ErrorKind, PHCError
from phc.engine.model import ParameterValuePair
from phc.engine.schema import ParameterDescriptor, Schema

SALT = "4fXXG0spB92WPB1NitT8/OH0VKI"
HASH = "iPBVuORECm5biUsjq33hn9/7BKqy9aPWKhFfK2haEsM"


def kind_of(schema, text):
    with pytest.raises(PHCError) as info:
        decode(schema, text)
    return info.value.kind


class TestStructure:
    def test_missing_leading_dollar(self, mtp_schema):
        assert kind_of(mtp_schema, "test-fn$m=1,t=1,p=1") == ErrorKind.INVALID_STRUCTURE

    def test_empty_input(self, mtp_schema):
        assert kind_of(mtp_schema, "") == ErrorKind.INVALID_STRUCTURE

    def test_only_dollar(self, mtp_schema):
        assert kind_of(mtp_schema, "$") == ErrorKind.INVALID_STRUCTURE

    @pytest.mark.parametrize("text", [
        "$test-fn$$m=1,t=1,p=1",
        "$test-fn$m=1,t=1,p=1$$" + HASH,
        "$test-fn$m=1,t=1,p=1$" + SALT + "$",
    ])
    def test_consecutive_dollars(self, mtp_schema, text):
        with pytest.raises(PHCError, match="two consecutive"):
            decode(mtp_schema, text)

    def test_too_many_segments(self, mtp_schema):
        text = f"$test-fn$m=1,t=1,p=1${SALT}${HASH}${HASH}"
        with pytest.raises(PHCError, match="too many") as info:
            decode(mtp_schema, text)
        assert info.value.kind == ErrorKind.INVALID_STRUCTURE


class TestFunctionName:
    def test_mismatch_single(self, mtp_schema):
        with pytest.raises(PHCError, match="expected name 'test-fn'") as info:
            decode(mtp_schema, "$other$m=1,t=1,p=1")
        assert info.value.kind == ErrorKind.MISMATCHED_FUNCTION_NAME

    def test_mismatch_lists_all_names(self):
        schema = Schema(("a", "b"))
        with pytest.raises(PHCError, match=r"\[a, b\]"):
            decode(schema, "$c")

    def test_case_sensitive(self, mtp_schema):
        assert kind_of(mtp_schema, "$TEST-FN$m=1,t=1,p=1") == ErrorKind.MISMATCHED_FUNCTION_NAME

    def test_function_only(self):
        instance = decode(Schema(("plain",)), "$plain")
        assert instance.function == "plain"
        assert instance.parameters == ()
        assert instance.salt == b"" and instance.hash == b""


class TestPositionalMatching:
    def test_all_present(self, mtp_schema):
        instance = decode(mtp_schema, "$test-fn$m=120,t=5000,p=2,keyid=abc")
        assert [(p.name, p.value, p.is_set) for p in instance.parameters] == [
            ("m", "120", True), ("t", "5000", True), ("p", "2", True), ("keyid", "abc", True),
        ]

    def test_trailing_optional_defaulted(self, mtp_schema):
        instance = decode(mtp_schema, "$test-fn$m=120,t=5000,p=2")
        keyid = instance.get("keyid")
        assert keyid == ParameterValuePair("keyid", "none", False)
        assert not instance.is_set("keyid")
        assert instance.value("keyid") == "none"

    def test_missing_required_in_middle(self, mtp_schema):
        with pytest.raises(PHCError, match="'t'") as info:
            decode(mtp_schema, "$test-fn$m=120,p=2")
        assert info.value.kind == ErrorKind.NON_OPTIONAL_PARAMETER_MISSING
        assert info.value.parameter == "t"

    def test_missing_required_at_end(self, mtp_schema):
        assert kind_of(mtp_schema, "$test-fn$m=120,t=5000") == \
            ErrorKind.NON_OPTIONAL_PARAMETER_MISSING

    def test_no_parameter_segment(self, mtp_schema):
        """Required parameters are still checked when the list is absent."""
        assert kind_of(mtp_schema, "$test-fn$" + SALT) == ErrorKind.NON_OPTIONAL_PARAMETER_MISSING

    def test_out_of_order(self, mtp_schema):
        assert kind_of(mtp_schema, "$test-fn$t=5000,m=120,p=2") == \
            ErrorKind.NON_OPTIONAL_PARAMETER_MISSING

    def test_extra_parameter(self, mtp_schema):
        with pytest.raises(PHCError, match="'x'") as info:
            decode(mtp_schema, "$test-fn$m=1,t=1,p=1,keyid=k,x=1")
        assert info.value.kind == ErrorKind.UNMATCHED_PARAMETER_NAME

    def test_unknown_after_required_consumes_optional(self, mtp_schema):
        """An unknown name skips past the optional keyid and is then unmatched."""
        assert kind_of(mtp_schema, "$test-fn$m=1,t=1,p=1,x=1") == \
            ErrorKind.UNMATCHED_PARAMETER_NAME

    def test_duplicate_parameter(self, mtp_schema):
        assert kind_of(mtp_schema, "$test-fn$m=1,m=1,t=1,p=1") == \
            ErrorKind.NON_OPTIONAL_PARAMETER_MISSING

    def test_optional_between_required(self):
        schema = Schema(("f",), (
            ParameterDescriptor("a"),
            ParameterDescriptor("b", default="2", optional=True),
            ParameterDescriptor("c"),
        ))
        instance = decode(schema, "$f$a=1,c=3")
        assert [(p.name, p.value, p.is_set) for p in instance.parameters] == [
            ("a", "1", True), ("b", "2", False), ("c", "3", True),
        ]

    def test_optional_out_of_order_unmatched(self):
        schema = Schema(("f",), (
            ParameterDescriptor("a", optional=True),
            ParameterDescriptor("b", optional=True),
        ))
        assert kind_of(schema, "$f$b=1,a=1") == ErrorKind.UNMATCHED_PARAMETER_NAME

    def test_missing_value(self, mtp_schema):
        with pytest.raises(PHCError, match="'t'") as info:
            decode(mtp_schema, "$test-fn$m=1,t,p=1")
        assert info.value.kind == ErrorKind.MISSING_PARAMETER_VALUE

    def test_value_split_on_first_equals(self):
        schema = Schema(("f",), (ParameterDescriptor("a", validator=lambda v: None),))
        assert decode(schema, "$f$a=b=c").value("a") == "b=c"

    def test_validation_failure_wraps_cause(self, mtp_schema):
        with pytest.raises(PHCError) as info:
            decode(mtp_schema, "$test-fn$m=0120,t=1,p=1")
        err = info.value
        assert err.kind == ErrorKind.PARAMETER_VALUE_VALIDATION
        assert err.parameter == "m"
        assert isinstance(err.cause, ValueError)
        assert err.__cause__ is err.cause
        assert "0120" in str(err)

    def test_default_validator_rejects_characters(self, mtp_schema):
        assert kind_of(mtp_schema, "$test-fn$m=1,t=1,p=1,keyid=a_b") == \
            ErrorKind.PARAMETER_VALUE_VALIDATION

    def test_match_parameters_direct(self, mtp_schema):
        parsed = [ParameterValuePair("m", "1"), ParameterValuePair("t", "2"),
                  ParameterValuePair("p", "3")]
        result = match_parameters(mtp_schema, parsed)
        assert len(result) == 4
        assert result[-1].is_set is False


class TestSaltAndHash:
    def test_salt_only(self, mtp_schema):
        instance = decode(mtp_schema, f"$test-fn$m=1,t=1,p=1${SALT}")
        assert instance.salt_text == SALT
        assert len(instance.salt) == 20
        assert instance.hash_text == ""
        assert instance.hash == b""

    def test_salt_and_hash(self, mtp_schema):
        instance = decode(mtp_schema, f"$test-fn$m=1,t=1,p=1${SALT}${HASH}")
        assert len(instance.hash) == 32
        assert instance.hash_text == HASH

    def test_bad_salt(self, mtp_schema):
        with pytest.raises(PHCError, match="salt") as info:
            decode(mtp_schema, "$test-fn$m=1,t=1,p=1$Hj5+dsK0Z")
        assert info.value.kind == ErrorKind.BASE64_DECODE
        assert isinstance(info.value.cause, Base64Error)

    def test_bad_hash(self, mtp_schema):
        with pytest.raises(PHCError, match="hash") as info:
            decode(mtp_schema, f"$test-fn$m=1,t=1,p=1${SALT}$Hj5+dsK0ZR")
        assert info.value.kind == ErrorKind.BASE64_DECODE

    def test_lenient_schema_accepts_dirty_bits(self):
        schema = Schema(("f",), codec=LENIENT)
        instance = decode(schema, "$f$Hj5+dsK0ZR")
        assert instance.salt == bytes([30, 62, 126, 118, 194, 180, 101])
        assert instance.salt_text == "Hj5+dsK0ZR"

    def test_equals_in_salt_position_is_parameter_list(self):
        """A segment containing '=' is always read as parameters."""
        schema = Schema(("f",))
        assert kind_of(schema, "$f$YQ==") == ErrorKind.UNMATCHED_PARAMETER_NAME


class TestBuild:
    def test_build_orders_by_schema(self, mtp_schema):
        instance = build(mtp_schema, "test-fn", {"p": "3", "m": "1", "t": "2"})
        assert [p.name for p in instance.parameters] == ["m", "t", "p", "keyid"]
        assert instance.set_parameters()[0] == ParameterValuePair("m", "1", True)

    def test_build_validates(self, mtp_schema):
        with pytest.raises(PHCError) as info:
            build(mtp_schema, "test-fn", {"m": "01", "t": "2", "p": "3"})
        assert info.value.kind == ErrorKind.PARAMETER_VALUE_VALIDATION

    def test_build_missing_required(self, mtp_schema):
        with pytest.raises(PHCError) as info:
            build(mtp_schema, "test-fn", {"m": "1"})
        assert info.value.kind == ErrorKind.NON_OPTIONAL_PARAMETER_MISSING

    def test_build_unknown_parameter(self, mtp_schema):
        with pytest.raises(PHCError) as info:
            build(mtp_schema, "test-fn", {"m": "1", "t": "2", "p": "3", "z": "0"})
        assert info.value.kind == ErrorKind.UNMATCHED_PARAMETER_NAME

    def test_build_wrong_function(self, mtp_schema):
        with pytest.raises(PHCError) as info:
            build(mtp_schema, "nope", {})
        assert info.value.kind == ErrorKind.MISMATCHED_FUNCTION_NAME

    def test_build_hash_without_salt(self, mtp_schema):
        with pytest.raises(PHCError, match="empty salt"):
            build(mtp_schema, "test-fn", {"m": "1", "t": "2", "p": "3"}, hash=HASH)

    def test_build_decodes_salt(self, mtp_schema):
        instance = build(mtp_schema, "test-fn", {"m": "1", "t": "2", "p": "3"}, SALT, HASH)
        assert len(instance.salt) == 20 and len(instance.hash) == 32

    def test_build_empty_value(self, mtp_schema):
        with pytest.raises(PHCError) as info:
            build(mtp_schema, "test-fn", {"m": "", "t": "2", "p": "3"})
        assert info.value.kind == ErrorKind.INVALID_PARAMETER_VALUE


class TestEmptyValues:
    """A parameter value needs at least one character."""

    @pytest.mark.parametrize("text", [
        "$test-fn$m=,t=2,p=3",
        "$test-fn$m=1,t=2,p=3,keyid=",
    ])
    def test_rejected(self, mtp_schema, text):
        with pytest.raises(PHCError) as info:
            decode(mtp_schema, text)
        assert info.value.kind == ErrorKind.INVALID_PARAMETER_VALUE

    def test_optional_base64_parameter(self):
        """An empty keyid would decode as set yet never be re-encoded."""
        with pytest.raises(PHCError) as info:
            decode(ARGON2_SCHEMA, "$argon2i$m=120,t=5000,p=2,keyid=")
        assert info.value.kind == ErrorKind.INVALID_PARAMETER_VALUE
        assert info.value.parameter == "keyid"

    def test_validator_not_consulted(self):
        schema = Schema(("f",), (ParameterDescriptor("a", validator=lambda v: None),))
        with pytest.raises(PHCError, match="empty value"):
            decode(schema, "$f$a=")


class TestLogging:
    def test_rejection_logs_kind_only(self, mtp_schema, caplog):
        """Salt and hash never reach the log."""
        caplog.set_level(logging.DEBUG, logger="phc.engine.decoder")
        with pytest.raises(PHCError):
            decode(mtp_schema, f"$test-fn$m=1,t=2,p=3${SALT}$Hj5+dsK0ZR")
        assert "BASE64_DECODE" in caplog.text
        assert "test-fn" in caplog.text
        assert SALT not in caplog.text
        assert "Hj5+dsK0ZR" not in caplog.text
