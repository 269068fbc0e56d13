"""Configuration loading and validation.

Settings come from three places, highest precedence first:

1. Explicit overrides (CLI options)
2. Environment variables, with a .env file loaded through python-dotenv
3. An optional YAML config file

    notion_token: secret_...        # NOTION_TOKEN
    root_page_id: 5983378...        # NOTION_ROOT_PAGE_ID
    vault_path: ~/Obsidian/Wiki     # OBSIDIAN_VAULT_PATH
    page_size: 100                  # NOTION_PAGE_SIZE
    collision_policy: overwrite     # NOTION_COLLISION_POLICY

The token, root page id and vault path are required. The result is a single
SyncConfig that the rest of the program receives explicitly.
"""

import os
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from ..notion_api.api_wrapper import MAX_PAGE_SIZE, normalize_page_id
from .errors import ConfigError, FilesystemError
from .models import COLLISION_POLICIES, SyncConfig


class ConfigLoader:
    """Builds a validated SyncConfig from overrides, environment and file."""

    # Config field -> environment variable
    ENV_VARS = {
        'notion_token': 'NOTION_TOKEN',
        'root_page_id': 'NOTION_ROOT_PAGE_ID',
        'vault_path': 'OBSIDIAN_VAULT_PATH',
        'page_size': 'NOTION_PAGE_SIZE',
        'collision_policy': 'NOTION_COLLISION_POLICY',
    }

    REQUIRED_FIELDS = ('notion_token', 'root_page_id', 'vault_path')

    DEFAULTS = {
        'page_size': MAX_PAGE_SIZE,
        'collision_policy': 'overwrite',
    }

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        use_dotenv: bool = True,
    ) -> SyncConfig:
        """Load and validate configuration.

        Args:
            config_path: Optional YAML file with config fields
            overrides: Values that win over everything else; None values are
                       ignored so unset CLI options fall through
            environ: Environment to read (defaults to os.environ)
            use_dotenv: Load a .env file into os.environ first

        Returns:
            SyncConfig ready to be passed to the sync command

        Raises:
            ConfigError: If a required field is missing or a value is invalid
            FilesystemError: If config_path cannot be read
        """
        if use_dotenv and environ is None:
            load_dotenv()
        env = os.environ if environ is None else environ

        values: Dict[str, Any] = dict(cls.DEFAULTS)
        if config_path:
            values.update(cls._read_file(config_path))

        for field_name, env_var in cls.ENV_VARS.items():
            env_value = env.get(env_var)
            if env_value is not None and env_value.strip():
                values[field_name] = env_value.strip()

        for field_name, value in (overrides or {}).items():
            if value is not None:
                values[field_name] = value

        return cls._parse_config(values)

    @classmethod
    def _read_file(cls, config_path: str) -> Dict[str, Any]:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(config_path, 'read', 'Configuration file not found')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return {}
        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        unknown = set(config_dict) - set(cls.ENV_VARS)
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}")
        return config_dict

    @classmethod
    def _parse_config(cls, values: Dict[str, Any]) -> SyncConfig:
        """Validate merged values and build the SyncConfig.

        Raises:
            ConfigError: If configuration is invalid
        """
        missing = [
            cls.ENV_VARS[name] for name in cls.REQUIRED_FIELDS
            if not str(values.get(name) or '').strip()
        ]
        if missing:
            raise ConfigError(
                f"Missing required settings: {', '.join(missing)} "
                f"(set them in the environment or a .env file)"
            )

        try:
            root_page_id = normalize_page_id(str(values['root_page_id']))
        except ValueError as e:
            raise ConfigError(str(e), 'root_page_id')

        try:
            page_size = int(values['page_size'])
        except (TypeError, ValueError):
            raise ConfigError(
                f"Field 'page_size' must be an integer, got {values['page_size']!r}",
                'page_size'
            )
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ConfigError(
                f"Field 'page_size' must be between 1 and {MAX_PAGE_SIZE}, got {page_size}",
                'page_size'
            )

        collision_policy = str(values['collision_policy']).strip().lower()
        if collision_policy not in COLLISION_POLICIES:
            raise ConfigError(
                f"Field 'collision_policy' must be one of {', '.join(COLLISION_POLICIES)}, "
                f"got '{values['collision_policy']}'",
                'collision_policy'
            )

        return SyncConfig(
            notion_token=str(values['notion_token']).strip(),
            root_page_id=root_page_id,
            vault_path=os.path.expanduser(str(values['vault_path']).strip()),
            page_size=page_size,
            collision_policy=collision_policy,
            dry_run=bool(values.get('dry_run', False)),
        )
