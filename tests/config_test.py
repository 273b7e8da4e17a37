from concurrent.futures import ThreadPoolExecutor

import pytest

from megamind.core.config import _ALLOWED_LOG_LEVELS
from megamind.core.config import _DEFAULT_LOG_DATEFMT
from megamind.core.config import _DEFAULT_LOG_FMT
from megamind.core.config import CallOptions
from megamind.core.config import Config
from megamind.core.config import ConsoleLoggerConfig
from megamind.core.config import FileLoggerConfig
from megamind.core.config import LoggerConfig
from megamind.core.config import TelemetryConfig
from megamind.core.config import config_property
from megamind.core.error import ConfigValidationError as Error
from megamind.core.quota import UNLIMITED


@pytest.fixture
def factory():
    def _create_test_class(name="internal", default=None, **kwargs):
        class TestClass:
            pass

        _property = config_property(default, **kwargs)
        _property.__set_name__(TestClass, name)
        setattr(TestClass, name, _property)
        return TestClass

    return _create_test_class


@pytest.mark.unit
class TestConfigProperty:
    def test_init_with_defaults(self):
        _property = config_property(None)
        assert _property.default is None
        assert _property.frozen is False
        assert _property.description is None
        assert _property.allowed is None
        assert _property.check is None
        assert _property.between is None
        assert _property.property == ""
        assert _property.validate is False
        assert _property.locks == {}

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("max_calls", "_max_calls"),
            ("cache", "_cache"),
            ("debug", "_debug"),
        ],
    )
    def test_set_name_configures_name(self, name, expected, factory):
        TestClass = factory(name, "goku")
        descriptor = getattr(TestClass, name)
        assert descriptor.property == expected
        assert descriptor.default == "goku"

    @pytest.mark.parametrize(
        "allowed, valid, invalid",
        [
            (("aang", "katara", "sokka"), "sokka", "zuko"),
            ((True, False), False, None),
            (("DEBUG", "INFO", "ERROR"), "INFO", "TRACE"),
        ],
    )
    def test_set_value_with_validation(self, allowed, valid, invalid, factory):
        TestClass = factory("avatar", valid, allowed=allowed)
        instance = TestClass()
        instance.avatar = valid
        assert instance.avatar == valid
        with pytest.raises(Error, match="not one of the allowed values"):
            instance.avatar = invalid

    @pytest.mark.parametrize("invalid", [0, 11, 15])
    def test_between_failure(self, invalid):
        _property = config_property(7, between=(1, 10))
        with pytest.raises(Error, match="is not between"):
            _property.__validate__(invalid)

    def test_check_exception_is_wrapped(self):
        _property = config_property(1, check=lambda x: x >= 0)
        with pytest.raises(Error, match="property validation failed"):
            _property.__validate__("not a number")

    def test_invalid_default_is_rejected(self, factory):
        with pytest.raises(Error, match="got invalid value for 'broken'"):
            factory("broken", -1, check=lambda x: x >= 0)

    def test_frozen(self, factory):
        TestClass = factory("spiderman", "peter parker", frozen=True)
        instance = TestClass()
        assert instance.spiderman == "peter parker"
        with pytest.raises(Error, match="cannot modify frozen property"):
            instance.spiderman = "miles morales"

    def test_instances_do_not_share_values(self, factory):
        TestClass = factory("hero", "Superman")
        first, second = TestClass(), TestClass()
        first.hero = "Batman"
        assert first.hero == "Batman"
        assert second.hero == "Superman"

    @pytest.mark.slow
    @pytest.mark.parametrize("threads, iterations", [(5, 100), (10, 200)])
    def test_thread_safety(self, threads, iterations, factory):
        members = ["Superman", "Batman", "Wonder Woman", "Flash", "Aquaman"]
        TestClass = factory("member", "Superman", allowed=set(members))
        jla = TestClass()
        errors = []

        def worker(wid):
            for index in range(iterations):
                jla.member = members[index % len(members)]
                if jla.member not in members:
                    errors.append(f"Invalid value from worker {wid}")

        with ThreadPoolExecutor(max_workers=threads) as executor:
            for future in [executor.submit(worker, i) for i in range(threads)]:
                future.result()
        assert errors == []


@pytest.mark.unit
class TestCallOptions:
    def test_defaults(self):
        options = CallOptions()
        assert options.minimum_delay_between_calls == 0
        assert options.max_calls == UNLIMITED
        assert options.call_immediately is True
        assert options.cache is False
        assert options.debug is False

    def test_overrides(self):
        options = CallOptions(max_calls=3, cache=True, debug=True)
        assert options.max_calls == 3
        assert options.cache is True
        assert options.debug is True
        assert CallOptions().max_calls == UNLIMITED

    def test_iteration_yields_every_option(self):
        options = dict(CallOptions(minimum_delay_between_calls=1000))
        assert options == {
            "minimum_delay_between_calls": 1000,
            "max_calls": UNLIMITED,
            "call_immediately": True,
            "cache": False,
            "debug": False,
        }

    @pytest.mark.parametrize("value", [0, -1, 2.5, True, "infinite", None])
    def test_invalid_max_calls(self, value):
        with pytest.raises(Error):
            CallOptions(max_calls=value)

    @pytest.mark.parametrize("value", [-1, 0.5, "100", False])
    def test_invalid_delay(self, value):
        with pytest.raises(Error):
            CallOptions(minimum_delay_between_calls=value)

    def test_unknown_option(self):
        with pytest.raises(Error, match="unknown call option: 'callRighAway'"):
            CallOptions(callRighAway=False)

    def test_repr(self):
        assert "max_calls=2" in repr(CallOptions(max_calls=2))


@pytest.mark.integration
class TestLoggerConfig:
    def test_file_defaults(self):
        config = FileLoggerConfig()
        assert config.enable is False
        assert config.level == "INFO"
        assert config.fmt == _DEFAULT_LOG_FMT
        assert config.path == "logs/megamind.log"
        assert config.encoding == "utf-8"
        assert config.max_size == "10MB"
        assert config.backups == 5

    @pytest.mark.parametrize("level", list(_ALLOWED_LOG_LEVELS))
    def test_level_allowed(self, level):
        config = FileLoggerConfig()
        config.level = level
        assert config.level == level

    @pytest.mark.parametrize("invalid", ["danger", "trace", "verbose"])
    def test_level_invalids(self, invalid):
        with pytest.raises(Error):
            FileLoggerConfig().level = invalid

    def test_encoding_frozen(self):
        with pytest.raises(Error, match="cannot modify frozen property"):
            FileLoggerConfig().encoding = "latin-1"

    def test_console_defaults(self):
        config = ConsoleLoggerConfig()
        assert config.enable is True
        assert config.level == "DEBUG"
        assert config.colour is True

    def test_nested_configuration_access(self):
        config = LoggerConfig()
        assert config.datefmt == _DEFAULT_LOG_DATEFMT
        assert config.as_json is False
        assert isinstance(config.file, FileLoggerConfig)
        assert isinstance(config.tty, ConsoleLoggerConfig)


@pytest.mark.integration
class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.name == "megamind"
        assert config.version == "19.10.2026"
        assert config.debug is False
        assert isinstance(config.logger, LoggerConfig)
        assert isinstance(config.telemetry, TelemetryConfig)
        assert config.telemetry.enabled is False

    def test_name_frozen(self):
        with pytest.raises(Error, match="cannot modify frozen property"):
            Config().name = "something-else"
