"""Service layer: lifecycle operations and external capability ports."""
