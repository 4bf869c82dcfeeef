"""Storage adapters for the note corpus."""
