# SPDX-License-Identifier: MIT

from yaml import dump

try:
    from yaml import CDumper as Dumper
except ImportError:
    from yaml import Dumper  # type: ignore[assignment]

from tasknotes import configuration
from tasknotes.logging_config import setup_logging
from tasknotes.repository.configuration import CONFIGURATION_REPO
from tasknotes.template.configuration import get_configuration_template


def initialize() -> configuration.Configuration:
    """
    Create the configuration file with defaults if it does not exist yet, set
    up logging from it and return it.
    """
    configuration.CONFIG_PATH.mkdir(parents=True, exist_ok=True)

    __ensure_config_files()

    config = CONFIGURATION_REPO.get_config()
    setup_logging(config["log_level"], config["log_file"])
    return config


def __ensure_config_files() -> None:
    if not configuration.APP_CONFIG_PATH.is_file():
        config: configuration.Configuration = get_configuration_template()
        configuration.APP_CONFIG_PATH.write_text(dump(config, Dumper=Dumper))
