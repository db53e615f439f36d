from __future__ import annotations

from typing import Protocol

from .model import CompanySettings


class SettingsProvider(Protocol):
    def get_company_settings(self) -> CompanySettings:
        """Raise PreconditionError when settings were never configured."""

        raise NotImplementedError
