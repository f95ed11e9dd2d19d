"""Framework adapters for querycache."""
