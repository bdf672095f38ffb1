"""CLI commands for funcpack."""
