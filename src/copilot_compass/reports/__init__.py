"""Report data model, validation, aggregation and assembly."""
