"""Cache backends implementing ICacheProvider."""
