"""Commands for the ig CLI."""
