"""inboxhook -- HTTP ingress for agent inboxes.

Accepts text messages addressed to named agents, appends them to
per-agent inbox files, and optionally types them into the tmux session
of the same name. Lets a phone or an automation reach long-running
terminal sessions without terminal access.
"""

__version__ = "0.1.0"
