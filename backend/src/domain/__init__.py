"""Domain layer: status rules, validation and the ports to external collaborators."""
