"""Genealogy lookup renderer: tree images, certificates and reports."""
