"""Domain layer: model, ports and the collection/reconciliation core."""
