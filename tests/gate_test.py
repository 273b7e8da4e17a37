import pytest

from megamind.core.base import Validator
from megamind.core.gate import NotificationKind
from megamind.core.gate import should_notify


class OnlyValid(Validator):
    def __init__(self):
        super().__init__(description="Lets through payloads containing VALID")
        self.seen = []

    def __call__(self, payload):
        self.seen.append(payload)
        return "VALID" in payload and "INVALID" not in payload


@pytest.mark.unit
class TestShouldNotify:
    @pytest.mark.parametrize("kind", list(NotificationKind))
    def test_permissive_without_predicates(self, kind):
        assert should_notify(kind, "anything") is True

    def test_local_predicate_decides(self):
        assert not should_notify(
            NotificationKind.SUCCESS, "data", local=lambda _: False
        )

    def test_global_predicate_used_without_local(self):
        validator = OnlyValid()
        assert should_notify(
            NotificationKind.SUCCESS, "VALID_SUCCESS", global_=validator
        )
        assert not should_notify(
            NotificationKind.SUCCESS, "INVALID_SUCCESS", global_=validator
        )
        assert validator.seen == ["VALID_SUCCESS", "INVALID_SUCCESS"]

    def test_local_overrides_global_entirely(self):
        validator = OnlyValid()
        assert should_notify(
            NotificationKind.ERROR,
            "INVALID_ERROR",
            local=lambda _: True,
            global_=validator,
        )
        assert validator.seen == []

    def test_truthiness_is_coerced(self):
        assert should_notify(NotificationKind.SUCCESS, [], local=len) is False
        assert should_notify(NotificationKind.SUCCESS, [1], local=len) is True


@pytest.mark.unit
class TestValidator:
    def test_name_defaults_to_class_name(self):
        validator = OnlyValid()
        assert validator.name == "OnlyValid"
        assert validator.description.startswith("Lets through")
        assert repr(validator).startswith("OnlyValid(name='OnlyValid'")

    def test_cannot_instantiate_abstract_validator(self):
        with pytest.raises(TypeError):
            Validator()
