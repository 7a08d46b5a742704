"""Pharmalink gateway: drug and protein lookups across Open PHACTS and a SPARQL store."""
