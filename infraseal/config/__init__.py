"""Policy and state file loading."""
from infraseal.config.loader import Policy, load_policy, load_state

__all__ = ["Policy", "load_policy", "load_state"]
