"""CLI layer (typer + rich). No decisions are made here."""
