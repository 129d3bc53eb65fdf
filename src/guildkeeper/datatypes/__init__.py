"""Value types shared across Guildkeeper: identifiers, privileges, guild config and ledger entries."""
