"""Like / save ledger and comments."""
