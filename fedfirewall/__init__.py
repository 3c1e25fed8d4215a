"""Inbound federated activity firewall.

Evaluates ordered interaction policies for each activity addressed to a
local actor and records an audit trail of every verdict.
"""

__version__ = "0.1.0"
