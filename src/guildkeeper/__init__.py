"""
Guildkeeper - authorization and per-guild configuration core

Guildkeeper backs a multi-guild chat management service. For every guild it
keeps a configuration record and a role-to-privilege map, and it keeps an
append-only moderation ledger of "slaps" handed out to members.

Core Components:

- **Privilege Model**: the closed set of privileges (admin, manager, event)
  and their text tokens
- **Authorization Engine**: answers which privileges a role holds, which roles
  hold a privilege, and whether a role or a set of roles is authorized
- **Guild Configuration**: creation, validation and field-by-field mutation of
  per-guild settings
- **Slap Ledger**: append-only moderation records with bounded, cursor-less
  pagination and counts at guild and member granularity
- **Admin Console**: interactive inspection of guilds and ledgers

Usage:
    from guildkeeper.main import main
    main()  # Opens the database and starts the admin console
"""
