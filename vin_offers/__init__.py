"""VIN commercial offer lookup service."""
