"""User preference storage with partial-update merge semantics."""
