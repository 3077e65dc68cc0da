"""fleetctl - fleet management command line client."""
