"""Hard-filter catalog search with sorting and pagination."""
