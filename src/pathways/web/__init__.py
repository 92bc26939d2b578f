"""Web API for pathway exports."""
