"""
Client configuration: base URL, session key name, reload-on-invalid-session.

Sources, lowest priority first: a JSON settings file, then CRUDKIT_*
environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ENV_BASE_URL = "CRUDKIT_BASE_URL"
ENV_SESSION_KEY = "CRUDKIT_SESSION_KEY"
ENV_RELOAD_ON_INVALID_SESSION = "CRUDKIT_RELOAD_ON_INVALID_SESSION"

_TRUTHY = {"1", "true", "yes", "on"}


class ClientConfig(BaseModel):
    base_url: Optional[str] = None
    session_key_name: Optional[str] = None
    reload_on_invalid_session: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get(ENV_BASE_URL) or None,
            session_key_name=env.get(ENV_SESSION_KEY) or None,
            reload_on_invalid_session=env.get(ENV_RELOAD_ON_INVALID_SESSION, "").strip().lower() in _TRUTHY,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ClientConfig":
        """Settings saved by `save`. A missing or unreadable file gives defaults."""
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except FileNotFoundError:
            return cls()
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable config file %s", path)
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.model_validate({k: v for k, v in data.items() if k in cls.model_fields})

    @classmethod
    def resolve(
        cls,
        path: Union[str, Path],
        environ: Optional[Mapping[str, str]] = None,
        **defaults: Any,
    ) -> "ClientConfig":
        """File settings overridden by the environment, then `defaults` for anything still unset."""
        merged = cls.from_file(path).model_dump(exclude_defaults=True)
        merged.update(cls.from_env(environ).model_dump(exclude_defaults=True))
        for key, value in defaults.items():
            merged.setdefault(key, value)
        return cls.model_validate(merged)

    def with_setting(self, key: str, value: Any) -> "ClientConfig":
        """Copy with one setting changed; strings are coerced ("yes" -> True)."""
        return type(self).model_validate({**self.model_dump(), key: value})

    def save(self, path: Union[str, Path]) -> None:
        """Write the non-default settings as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.model_dump(exclude_defaults=True), indent=2))
