"""Similar, nearby and new-listing suggestion feeds."""
