"""HTTP API: health probes and the versioned module routers.

Import the root router from ``rolegate.api.router``; importing it mounts
every feature module.
"""
