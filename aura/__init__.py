"""AURA Emergency Protocol: real-time exploration game on a dialogue puzzle backend."""
