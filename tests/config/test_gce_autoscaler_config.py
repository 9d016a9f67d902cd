import os
import tempfile
import unittest

from gce_autoscaler.config.common.logging import LoggingConfig
from gce_autoscaler.config.common.web import WebConfig
from gce_autoscaler.config.section.gce_autoscaler import GCEAutoScalerConfig
from gce_autoscaler.config.types.gce_environment import GCEEnvironmentConfig
from gce_autoscaler.utility.logging.utility import setup_logger
from tests.utility.utility import logging_test_name

ENV_ARGS = ["--project-id", "super-project", "-z", "winkie-country", "-mig", "druid-workers", "-tw", "2"]

TOML_CONFIG = """
[gce_autoscaler]
operation_timeout_seconds = 60
max_filter_values = 50

[gce_autoscaler.env_config]
project_id = "super-project"
zone_name = "winkie-country"
managed_instance_group_name = "druid-workers"
target_workers = 2
min_workers = 1
max_workers = 8

[gce_autoscaler.web_config]
adapter_web_port = 9090

[gce_autoscaler.logging_config]
level = "DEBUG"
"""


def _env_config(**overrides) -> GCEEnvironmentConfig:
    values = dict(
        project_id="super-project",
        zone_name="winkie-country",
        managed_instance_group_name="druid-workers",
        target_workers=2,
        min_workers=0,
        max_workers=4,
    )
    values.update(overrides)
    return GCEEnvironmentConfig(**values)


class TestGCEEnvironmentConfig(unittest.TestCase):
    def setUp(self) -> None:
        setup_logger()
        logging_test_name(self)

    def test_validation(self):
        with self.assertRaises(ValueError):
            _env_config(project_id="")
        with self.assertRaises(ValueError):
            _env_config(zone_name="")
        with self.assertRaises(ValueError):
            _env_config(managed_instance_group_name="")
        with self.assertRaises(ValueError):
            _env_config(target_workers=-1)
        with self.assertRaises(ValueError):
            _env_config(min_workers=-1)
        with self.assertRaises(ValueError):
            _env_config(min_workers=5, max_workers=4)

        _env_config(target_workers=0, min_workers=4, max_workers=4)

    def test_overlord_json_keys(self):
        self.assertEqual(
            _env_config().to_dict(),
            {
                "projectId": "super-project",
                "zoneName": "winkie-country",
                "managedInstanceGroupName": "druid-workers",
                "targetWorkers": 2,
                "minWorkers": 0,
                "maxWorkers": 4,
            },
        )

    def test_from_dict(self):
        config = _env_config()

        self.assertEqual(GCEEnvironmentConfig.from_dict(config.to_dict()), config)


class TestGCEAutoScalerConfig(unittest.TestCase):
    def setUp(self) -> None:
        setup_logger()
        logging_test_name(self)

    def test_validation(self):
        with self.assertRaises(ValueError):
            GCEAutoScalerConfig(env_config=_env_config(), operation_timeout_seconds=0)
        with self.assertRaises(ValueError):
            GCEAutoScalerConfig(env_config=_env_config(), operation_poll_interval_seconds=0)
        with self.assertRaises(ValueError):
            GCEAutoScalerConfig(env_config=_env_config(), max_filter_values=0)
        with self.assertRaises(ValueError):
            WebConfig(adapter_web_port=0)
        with self.assertRaises(ValueError):
            LoggingConfig(paths=())

        LoggingConfig(paths=(), config_file="logging.conf")

    def test_dict_round_trip(self):
        config = GCEAutoScalerConfig(
            env_config=_env_config(),
            logging_config=LoggingConfig(paths=("/dev/stderr", "/tmp/autoscaler.log")),
            max_filter_values=20,
        )

        data = config.to_dict()

        self.assertEqual(data["envConfig"]["managedInstanceGroupName"], "druid-workers")
        self.assertEqual(data["loggingConfig"]["paths"], ["/dev/stderr", "/tmp/autoscaler.log"])
        self.assertEqual(GCEAutoScalerConfig.from_dict(data), config)

    def test_parse_command_line(self):
        config = GCEAutoScalerConfig.parse(
            "test", "gce_autoscaler", ENV_ARGS + ["-minw", "1", "-maxw", "6", "-p", "9000", "-opi", "0.5"]
        )

        self.assertEqual(config.env_config, _env_config(min_workers=1, max_workers=6))
        self.assertEqual(config.web_config.adapter_web_port, 9000)
        self.assertEqual(config.operation_poll_interval_seconds, 0.5)
        self.assertEqual(config.operation_timeout_seconds, 300)
        self.assertEqual(config.logging_config.paths, ("/dev/stdout",))

    def test_parse_toml_with_command_line_override(self):
        with tempfile.NamedTemporaryFile("w", suffix=".toml", delete=False) as f:
            f.write(TOML_CONFIG)

        try:
            config = GCEAutoScalerConfig.parse("test", "gce_autoscaler", ["-c", f.name, "-maxw", "10"])
        finally:
            os.unlink(f.name)

        self.assertEqual(config.env_config, _env_config(min_workers=1, max_workers=10))
        self.assertEqual(config.web_config.adapter_web_port, 9090)
        self.assertEqual(config.logging_config.level, "DEBUG")
        self.assertEqual(config.operation_timeout_seconds, 60)
        self.assertEqual(config.max_filter_values, 50)

    def test_parse_missing_required_value(self):
        with self.assertRaises(SystemExit):
            GCEAutoScalerConfig.parse("test", "gce_autoscaler", ENV_ARGS + ["-minw", "1"])

    def test_parse_invalid_value(self):
        with self.assertRaises(SystemExit):
            GCEAutoScalerConfig.parse("test", "gce_autoscaler", ENV_ARGS + ["-minw", "5", "-maxw", "1"])
