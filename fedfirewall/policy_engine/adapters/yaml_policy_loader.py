"""YAML-based policy loader adapter."""

import os
import uuid
from typing import Any, Dict, List

import yaml

from fedfirewall.core.exceptions import ConfigurationError
from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE, Policy

# Namespace for ids of YAML entries that do not set one
POLICY_ID_NAMESPACE = uuid.UUID("6f0f4f3e-9a53-4c57-8a0e-2d7c1b9e5a41")


def slot_policy_id(entry: Dict[str, Any]) -> str:
    """
    Derive a stable policy ID from the slot a policy occupies.

    The slot is (purpose, scope, owner, order), which is unique among
    stored policies, so loading the same file again yields the same IDs.
    """
    slot = "/".join(
        [
            str(entry.get("purpose") or FEDERATED_BLOCK_PURPOSE),
            str(entry.get("scope") or ""),
            str(entry.get("owner_id") or ""),
            str(entry.get("order")),
        ]
    )
    return str(uuid.uuid5(POLICY_ID_NAMESPACE, slot))


class YAMLPolicyLoader:
    """Loads policy definitions from a YAML file.

    Expected layout::

        policies:
          - order: 0
            scope: instance
            kind: instance_deny
            subject: spam.example
            description: Known spam instance
          - order: 0
            scope: user
            owner_id: alice
            kind: actor_deny
            subject: https://other.example/users/troll

    Entries without an ``id`` get one derived from their slot, see
    :func:`slot_policy_id`.
    """

    def __init__(self, policies_path: str = "policies.yaml"):
        """
        Initialize YAML policy loader.

        Args:
            policies_path: Path to policies YAML file
        """
        self.policies_path = policies_path

    def load(self) -> List[Policy]:
        """
        Load policies from YAML file.

        Returns:
            List of validated policies, in file order

        Raises:
            ConfigurationError: If the file is missing, unreadable or holds an invalid policy
        """
        if not os.path.exists(self.policies_path):
            raise ConfigurationError(f"policy file not found: {self.policies_path}", {"path": self.policies_path})

        try:
            with open(self.policies_path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"failed to read policy file {self.policies_path}: {e}", {"path": self.policies_path}
            ) from e

        entries = document.get("policies") if isinstance(document, dict) else None
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ConfigurationError("'policies' must be a list", {"path": self.policies_path})

        policies = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ConfigurationError(f"policy entry {index} must be a mapping", {"path": self.policies_path})
            if not entry.get("id"):
                entry = {**entry, "id": slot_policy_id(entry)}
            policies.append(Policy.load(entry))
        return policies
