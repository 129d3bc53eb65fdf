"""
Configuration management for Guildkeeper.

- **app_configuration.py**: YAML loader for process-wide settings (database
  path, message length limit, offered languages). Falls back gracefully on
  missing or malformed config files.

- **database_settings.py**: typed view over the ``database`` section.

Per-guild configuration is not here; it lives in the database and is managed
by ``guildkeeper.services.guild_config_service``.
"""
