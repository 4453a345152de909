"""Adaptateurs : services transverses, interface CLI."""
