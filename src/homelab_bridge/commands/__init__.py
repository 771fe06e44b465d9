"""Click subcommands for homelab-bridge."""
