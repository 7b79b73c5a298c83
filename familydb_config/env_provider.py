# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Environment-backed configuration provider."""

import os
from collections.abc import Mapping
from typing import Any

from .base import FALSE_VALUES, TRUE_VALUES, ConfigProvider


class EnvConfigProvider(ConfigProvider):
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        value = self._environ.get(key)
        # Treat VAR= the same as an unset variable
        return default if value in (None, "") else value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default

        value_lower = value.lower()
        if value_lower in TRUE_VALUES:
            return True
        if value_lower in FALSE_VALUES:
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
