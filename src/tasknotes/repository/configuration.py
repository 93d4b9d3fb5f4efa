# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import Dumper, SafeLoader as Loader  # type: ignore[assignment]

from tasknotes import configuration
from tasknotes.template.configuration import get_configuration_template

logger = logging.getLogger(__name__)


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError("Configuration could not be loaded")
        return self._config

    def __load_data(self) -> None:
        if not configuration.APP_CONFIG_PATH.is_file():
            logger.debug(
                "No configuration at %s, using defaults", configuration.APP_CONFIG_PATH
            )
            self._config = get_configuration_template()
            return

        self._config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)

        if self._config is None:
            raise ValueError(f"Configuration file {configuration.APP_CONFIG_PATH} is empty")

        # Settings added after a config file was written take their defaults
        for key, value in get_configuration_template().items():
            if key not in self._config:
                logger.debug("Adding missing setting %s to configuration", key)
                self._config[key] = value  # type: ignore[literal-required]

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        configuration.APP_CONFIG_PATH.write_text(dump(config, Dumper=Dumper))

    def flush(self) -> None:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False

    def reset(self) -> None:
        """Forget the loaded configuration so the next access reads the file."""
        self._config = None
        self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        work_week: Optional[list[str]] = None,
        first_day_of_week: Optional[str] = None,
        completed_statuses: Optional[list[str]] = None,
        hide_completed_from_overdue: Optional[bool] = None,
        default_recurrence_anchor: Optional[str] = None,
        priority_weights: Optional[dict[str, int]] = None,
        log_level: Optional[str] = None,
        log_file: Optional[str] = None,
        remove_log_file: bool = False,
    ) -> None:
        self.is_dirty = True

        if work_week is not None:
            self.config["work_week"] = work_week
        if first_day_of_week is not None:
            self.config["first_day_of_week"] = first_day_of_week
        if completed_statuses is not None:
            self.config["completed_statuses"] = completed_statuses
        if hide_completed_from_overdue is not None:
            self.config["hide_completed_from_overdue"] = hide_completed_from_overdue
        if default_recurrence_anchor is not None:
            self.config["default_recurrence_anchor"] = default_recurrence_anchor
        if priority_weights is not None:
            self.config["priority_weights"] = priority_weights
        if log_level is not None:
            self.config["log_level"] = log_level
        if log_file is not None:
            self.config["log_file"] = log_file
        if remove_log_file:
            self.config["log_file"] = None


CONFIGURATION_REPO = ConfigurationRepository()
