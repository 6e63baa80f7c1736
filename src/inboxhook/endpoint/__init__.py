"""HTTP endpoint module for inboxhook.

Routes inbound requests to the health, inbox, send and agents handlers,
enforcing the shared-secret token and rendering every outcome as a JSON
envelope.
"""
