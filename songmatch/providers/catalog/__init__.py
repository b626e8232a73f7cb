"""Remote catalog providers implementing ICatalogProvider."""
