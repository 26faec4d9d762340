"""CRM analytics over shipment ledgers."""

__version__ = "0.1.0"
