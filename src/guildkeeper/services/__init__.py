"""
Service layer: the operations Guildkeeper exposes to its callers.

- AuthorizationService: privilege queries and role-map changes
- GuildConfigService: guild configuration lifecycle
- LedgerService: slap ledger append, pagination and counts

Every service takes the shared ``Database`` handle in its constructor.
"""
